"""Advisors that wrap every agent call: request logging and retrieval augmentation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Protocol

from rag_mcp_agent.config import RetrievalConfig
from rag_mcp_agent.obs.logger import get_logger
from rag_mcp_agent.retrieval.vector_store import VectorStore
from rag_mcp_agent.types import Document

logger = get_logger(__name__)

_CONTEXT_TEMPLATE = """{query}

Context information is below, surrounded by ---------------------

---------------------
{context}
---------------------

Given the context and provided history information and not prior knowledge,
reply to the user comment. If the answer is not in the context, inform
the user that you can't answer the question.
"""


@dataclass(slots=True)
class AdvisedRequest:
    """A chat request as it flows through the advisor chain."""

    system_prompt: str
    user_text: str
    query: str
    context: list[Document] = field(default_factory=list)


class Advisor(Protocol):
    name: str

    def before(self, request: AdvisedRequest) -> AdvisedRequest: ...

    def after(self, request: AdvisedRequest, answer: str) -> None: ...


class SimpleLoggerAdvisor:
    """Logs the outgoing request and the model's answer."""

    name = "SimpleLoggerAdvisor"

    def before(self, request: AdvisedRequest) -> AdvisedRequest:
        logger.debug("request: system=%r user=%r", request.system_prompt, request.user_text)
        return request

    def after(self, request: AdvisedRequest, answer: str) -> None:
        logger.debug("response for %r: %r", request.query, answer)


class QuestionAnswerAdvisor:
    """Appends similar documents from the vector store to the user message."""

    name = "QuestionAnswerAdvisor"

    def __init__(self, vector_store: VectorStore, config: RetrievalConfig | None = None) -> None:
        self.vector_store = vector_store
        self.config = config or RetrievalConfig()

    def before(self, request: AdvisedRequest) -> AdvisedRequest:
        documents = [
            doc
            for doc in self.vector_store.similarity_search(request.query, k=self.config.top_k)
            if doc is not None
        ]
        context = "\n".join(doc.text for doc in documents)
        return replace(
            request,
            user_text=_CONTEXT_TEMPLATE.format(query=request.user_text, context=context),
            context=documents,
        )

    def after(self, request: AdvisedRequest, answer: str) -> None:
        return None
