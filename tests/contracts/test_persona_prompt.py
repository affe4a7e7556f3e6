from rag_mcp_agent.agent.advisors import AdvisedRequest, QuestionAnswerAdvisor
from rag_mcp_agent.agent.planner import _SYSTEM_PROMPT
from rag_mcp_agent.types import Document


def test_persona_names_assistant_and_required_steps() -> None:
    assert "named Jennie" in _SYSTEM_PROMPT
    assert "GitHub username" in _SYSTEM_PROMPT
    assert "Good Morning" in _SYSTEM_PROMPT
    assert "thanking the user" in _SYSTEM_PROMPT


def test_context_template_restricts_answers_to_retrieved_context(stub_store) -> None:
    store = stub_store([Document(doc_id="d", text="Orders over $50 ship free.", score=0.4), None])
    advisor = QuestionAnswerAdvisor(store)

    request = advisor.before(
        AdvisedRequest(system_prompt=_SYSTEM_PROMPT, user_text="Is shipping free?", query="Is shipping free?")
    )

    assert store.queries == [("Is shipping free?", 4)]
    assert [doc.text for doc in request.context] == ["Orders over $50 ship free."]
    assert "Orders over $50 ship free." in request.user_text
    assert "inform\nthe user that you can't answer the question" in request.user_text
