"""LangChain-based tool-calling agent with an advisor chain."""

from __future__ import annotations

from importlib import import_module
from typing import Any

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

_agents_module = import_module("langchain.agents")
create_agent = getattr(_agents_module, "create_agent", None)
AgentExecutor = getattr(_agents_module, "AgentExecutor", None)
create_tool_calling_agent = getattr(_agents_module, "create_tool_calling_agent", None)
_AGENT_RUNTIME = (
    "legacy"
    if callable(AgentExecutor) and callable(create_tool_calling_agent)
    else "graph"
)

from rag_mcp_agent.agent.advisors import AdvisedRequest, Advisor
from rag_mcp_agent.agent.registry import ToolRegistry
from rag_mcp_agent.config import AgentConfig
from rag_mcp_agent.obs.logger import get_logger
from rag_mcp_agent.retrieval.vector_store import VectorStore
from rag_mcp_agent.types import ToolTrace

logger = get_logger(__name__)

_SYSTEM_PROMPT = """
You are an intelligent assistant named Jennie.
Your tasks are as follows:
1. Retrieve the user's GitHub username and the current time using the available tools.
2. Greet the user appropriately with "Good Morning," "Good Afternoon," or "Good Night," based on their current time.
3. Provide a complete response to the user's query in presentable format (no markdown format).
4. In your response, explicitly mention the user's GitHub username and the current time.
5. Conclude by thanking the user for using your services.
""".strip()


def class_name(obj: Any) -> str | None:
    if obj is None:
        return None
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


class AdvisedAgent:
    """Runs the advisor chain around a single answer-generation step.

    Subclasses implement `_generate`; persona, advisors and capability
    reporting are shared. Tool traces go to whatever observer the registry
    was wired with.
    """

    def __init__(
        self,
        *,
        tool_registry: ToolRegistry,
        vector_store: VectorStore,
        advisors: list[Advisor] | None = None,
    ) -> None:
        self.tool_registry = tool_registry
        self.vector_store = vector_store
        self.advisors = list(advisors or [])

    @property
    def model_name(self) -> str | None:
        return None

    @property
    def backend(self) -> Any:
        return self

    def ask(self, query: str) -> str:
        """Answer one user query and return only the answer text."""

        request = AdvisedRequest(system_prompt=_SYSTEM_PROMPT, user_text=query, query=query)
        for advisor in self.advisors:
            request = advisor.before(request)

        answer = self._generate(request)

        for advisor in reversed(self.advisors):
            advisor.after(request, answer)
        return answer

    def describe(self) -> dict[str, Any]:
        """Report the assembled configuration without touching it."""

        specs = self.tool_registry.specs()
        return {
            "LLM Model": self.model_name,
            "chatClientClass": class_name(self.backend),
            "vectorStoreClass": class_name(self.vector_store),
            "toolCallbackCount": len(specs),
            "remoteToolCount": len(self.tool_registry.specs(origin="remote")),
            "tools": [{"name": spec.name, "description": spec.description} for spec in specs],
            "advisors": [advisor.name for advisor in self.advisors],
        }

    def _generate(self, request: AdvisedRequest) -> str:
        raise NotImplementedError


class ToolCallingAgent(AdvisedAgent):
    """Wraps a LangChain tool-calling agent over a chat model."""

    def __init__(
        self,
        *,
        llm: Any,
        tool_registry: ToolRegistry,
        vector_store: VectorStore,
        advisors: list[Advisor] | None = None,
        config: AgentConfig | None = None,
        executor: Any | None = None,
    ) -> None:
        super().__init__(tool_registry=tool_registry, vector_store=vector_store, advisors=advisors)
        self.llm = llm
        self.config = config or AgentConfig()

        self.tools = self.tool_registry.as_langchain_tools()
        self._runtime = "custom" if executor is not None else _AGENT_RUNTIME
        if executor is not None:
            self.executor = executor
        elif _AGENT_RUNTIME == "legacy":
            if not callable(create_tool_calling_agent) or not callable(AgentExecutor):
                raise RuntimeError("Legacy LangChain agent runtime is unavailable.")
            prompt = ChatPromptTemplate.from_messages(
                [
                    ("system", _SYSTEM_PROMPT),
                    ("human", "{input}"),
                    MessagesPlaceholder(variable_name="agent_scratchpad"),
                ]
            )

            agent = create_tool_calling_agent(self.llm, self.tools, prompt)
            self.executor = AgentExecutor(
                agent=agent,
                tools=self.tools,
                max_iterations=self.config.max_iterations,
                verbose=False,
                handle_parsing_errors=True,
            )
        else:
            if not callable(create_agent):
                raise RuntimeError("LangChain create_agent is unavailable.")
            self.executor = create_agent(
                model=self.llm,
                tools=self.tools,
                system_prompt=_SYSTEM_PROMPT,
            )

    @property
    def model_name(self) -> str | None:
        return getattr(self.llm, "model_name", None) or getattr(self.llm, "model", None)

    @property
    def backend(self) -> Any:
        return self.llm

    def _generate(self, request: AdvisedRequest) -> str:
        logger.info("Agent request with %d tool(s): %s", len(self.tools), request.query)
        if self._runtime == "legacy":
            result = self.executor.invoke({"input": request.user_text})
            return str(result.get("output", ""))
        result = self.executor.invoke(
            {"messages": [{"role": "user", "content": request.user_text}]}
        )
        return _extract_graph_answer(result)


def log_tool_trace(trace: ToolTrace) -> None:
    logger.info("Tool %s finished in %.1f ms", trace.name, trace.latency_ms)


def _extract_graph_answer(result: Any) -> str:
    if not isinstance(result, dict):
        return str(result)
    messages = result.get("messages", [])
    if not isinstance(messages, list) or not messages:
        return str(result.get("output", ""))
    last = messages[-1]
    if isinstance(last, dict):
        return str(last.get("content", ""))
    content = getattr(last, "content", "")
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)
