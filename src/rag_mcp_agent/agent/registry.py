"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any, Literal

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field

from rag_mcp_agent.types import ToolResult, ToolTrace


class ToolSpec(BaseModel):
    """Declarative tool descriptor shared by local and remote tools.

    Local tools validate input with a pydantic `args_schema`; remote tools
    carry the JSON schema advertised by their server and receive the raw
    payload.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel] | dict[str, Any]
    handler: Callable[[Any], str | ToolResult]
    async_handler: Callable[[Any], Awaitable[str | ToolResult]] | None = None
    origin: Literal["local", "remote"] = "local"
    tags: list[str] = Field(default_factory=list)

    def invoke(self, payload: dict[str, Any]) -> str:
        return _render(self.handler(self._coerce(payload)))

    async def ainvoke(self, payload: dict[str, Any]) -> str:
        if self.async_handler is None:
            return self.invoke(payload)
        return _render(await self.async_handler(self._coerce(payload)))

    def _coerce(self, payload: dict[str, Any]) -> Any:
        if isinstance(self.args_schema, dict):
            return payload
        return self.args_schema.model_validate(payload)


class ToolRegistry:
    """Stores tool specs and exports LangChain-compatible tool objects."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def execute(self, name: str, payload: dict[str, Any]) -> str:
        spec = self._tools.get(name)
        if spec is None:
            raise KeyError(f"Unknown tool: {name}")
        return self._execute_spec(spec, payload)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    func=self._build_function(spec),
                    coroutine=self._build_coroutine(spec) if spec.async_handler else None,
                )
            )
        return tools

    def specs(self, origin: Literal["local", "remote"] | None = None) -> list[ToolSpec]:
        return [spec for spec in self._tools.values() if origin is None or spec.origin == origin]

    def _build_function(self, spec: ToolSpec) -> Callable[..., str]:
        def _callable(**kwargs: Any) -> str:
            return self._execute_spec(spec, kwargs)

        return _callable

    def _build_coroutine(self, spec: ToolSpec) -> Callable[..., Awaitable[str]]:
        async def _acallable(**kwargs: Any) -> str:
            start = perf_counter()
            output = await spec.ainvoke(kwargs)
            self._observe(spec, kwargs, output, start)
            return output

        return _acallable

    def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any]) -> str:
        start = perf_counter()
        output = spec.invoke(payload)
        self._observe(spec, payload, output, start)
        return output

    def _observe(self, spec: ToolSpec, payload: dict[str, Any], output: str, start: float) -> None:
        latency_ms = (perf_counter() - start) * 1000.0
        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=spec.name,
                    input_payload=payload,
                    output_preview=output[:320],
                    latency_ms=latency_ms,
                )
            )


def _render(result: str | ToolResult) -> str:
    if isinstance(result, ToolResult):
        return result.render()
    return result
