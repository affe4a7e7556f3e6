"""Offline agent used when no chat model is configured."""

from __future__ import annotations

from rag_mcp_agent.agent.advisors import AdvisedRequest
from rag_mcp_agent.agent.planner import AdvisedAgent

NO_CONTEXT_ANSWER = "I can't answer the question: no chat model is configured and no matching context was found."


class OfflineAgent(AdvisedAgent):
    """Answers from retrieved context without any LLM call.

    Keeps the same `ask`/`describe` contract as `ToolCallingAgent` and is
    useful for local environments where `OPENAI_API_KEY` is not set. Tools stay
    registered and reported, but nothing calls them.
    """

    def _generate(self, request: AdvisedRequest) -> str:
        if not request.context:
            return NO_CONTEXT_ANSWER
        return "\n".join(doc.text for doc in request.context)
