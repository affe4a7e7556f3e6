"""Process-scoped wiring of vector store, tools, ingestion and agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rag_mcp_agent.agent.advisors import QuestionAnswerAdvisor, SimpleLoggerAdvisor
from rag_mcp_agent.agent.fallback import OfflineAgent
from rag_mcp_agent.agent.planner import AdvisedAgent, ToolCallingAgent, log_tool_trace
from rag_mcp_agent.agent.registry import ToolRegistry
from rag_mcp_agent.agent.remote_tools import (
    BearerTokenInjector,
    McpToolProvider,
    register_remote_tools,
)
from rag_mcp_agent.agent.tools import register_builtin_tools
from rag_mcp_agent.config import AgentConfig, RetrievalConfig, Settings
from rag_mcp_agent.ingest.embedder import Embedder, HashingEmbedder, LangChainEmbedder
from rag_mcp_agent.ingest.parser import ParserRegistry
from rag_mcp_agent.ingest.service import IngestionService
from rag_mcp_agent.obs.logger import get_logger
from rag_mcp_agent.retrieval.vector_store import (
    FaissVectorStoreAdapter,
    InMemoryVectorStore,
    VectorStore,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AgentRuntime:
    """Long-lived handles built once at startup and never reassigned."""

    settings: Settings
    vector_store: VectorStore
    tool_registry: ToolRegistry
    ingestion: IngestionService
    agent: AdvisedAgent

    @property
    def llm_configured(self) -> bool:
        return isinstance(self.agent, ToolCallingAgent)


def _create_llm(settings: Settings) -> Any:
    if settings.openai_api_key is None:
        return None

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=settings.openai_model,
        api_key=settings.openai_api_key.get_secret_value(),
        temperature=0,
    )


def _create_embedder(settings: Settings) -> Embedder:
    if settings.openai_api_key is None:
        return HashingEmbedder()

    from langchain_openai import OpenAIEmbeddings

    return LangChainEmbedder(
        OpenAIEmbeddings(
            model=settings.openai_embedding_model,
            api_key=settings.openai_api_key.get_secret_value(),
        )
    )


def _create_vector_store(settings: Settings, embedder: Embedder) -> VectorStore:
    if settings.vector_store == "faiss":
        return FaissVectorStoreAdapter(embedder)
    return InMemoryVectorStore(embedder)


def _create_mcp_provider(settings: Settings) -> McpToolProvider | None:
    if not settings.mcp_server_url:
        return None
    injector = (
        BearerTokenInjector(settings.mcp_server_url, settings.mcp_server_api_key.get_secret_value())
        if settings.mcp_server_api_key is not None
        else None
    )
    return McpToolProvider(
        settings.mcp_server_url,
        injector=injector,
        timeout_seconds=settings.mcp_timeout_seconds,
    )


def build_runtime(
    settings: Settings,
    *,
    llm: Any | None = None,
    vector_store: VectorStore | None = None,
    mcp_provider: McpToolProvider | None = None,
) -> AgentRuntime:
    """Wire every collaborator from `settings`.

    Explicit `llm`, `vector_store` and `mcp_provider` arguments take precedence
    over the ones derived from settings. A remote discovery failure propagates.
    """

    store = vector_store or _create_vector_store(settings, _create_embedder(settings))
    ingestion = IngestionService(
        store,
        ParserRegistry(),
        docs_dir=settings.docs_dir,
        default_document=settings.default_document,
    )

    registry = ToolRegistry()
    registry.set_observer(log_tool_trace)
    register_builtin_tools(registry)
    provider = mcp_provider or _create_mcp_provider(settings)
    if provider is not None:
        register_remote_tools(registry, provider)

    advisors = [SimpleLoggerAdvisor(), QuestionAnswerAdvisor(store, RetrievalConfig())]
    chat_model = llm if llm is not None else _create_llm(settings)
    agent: AdvisedAgent
    if chat_model is not None:
        agent = ToolCallingAgent(
            llm=chat_model,
            tool_registry=registry,
            vector_store=store,
            advisors=advisors,
            config=AgentConfig(),
        )
    else:
        logger.warning("No chat model configured; answering from retrieved context only")
        agent = OfflineAgent(tool_registry=registry, vector_store=store, advisors=advisors)

    return AgentRuntime(
        settings=settings,
        vector_store=store,
        tool_registry=registry,
        ingestion=ingestion,
        agent=agent,
    )
