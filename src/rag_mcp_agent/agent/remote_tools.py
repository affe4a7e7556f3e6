"""Remote tool discovery and invocation over MCP streamable HTTP."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Coroutine
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, TypeVar

import httpx
from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from rag_mcp_agent.agent.registry import ToolRegistry, ToolSpec
from rag_mcp_agent.obs.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SessionOpener = Callable[[], AbstractAsyncContextManager[Any]]


class BearerTokenInjector:
    """httpx request hook adding a bearer token for exactly one endpoint.

    The request URL must equal `endpoint` as a string; every other request
    passes through untouched. `endpoint` is normalized the way httpx
    normalizes request URLs (default port dropped, host lowercased) so a
    configured value always matches its own requests.
    """

    def __init__(self, endpoint: str, token: str) -> None:
        self.endpoint = str(httpx.URL(endpoint))
        self._token = token

    def apply(self, request: httpx.Request) -> bool:
        if str(request.url) != self.endpoint:
            return False
        logger.info("Adding Authorization header for endpoint: %s", request.url)
        request.headers["Authorization"] = f"Bearer {self._token}"
        return True

    async def __call__(self, request: httpx.Request) -> None:
        self.apply(request)


class McpToolProvider:
    """Discovers tools on one MCP server and calls them.

    Each discovery or call opens a short-lived session. `session_opener` can be
    swapped for anything yielding an object with `list_tools` and `call_tool`
    coroutines. The sync methods are safe to use from inside a running event
    loop (uvicorn builds the app factory inside one).
    """

    def __init__(
        self,
        url: str,
        *,
        injector: BearerTokenInjector | None = None,
        timeout_seconds: float = 30.0,
        session_opener: SessionOpener | None = None,
    ) -> None:
        self.url = url
        self._injector = injector
        self._timeout_seconds = timeout_seconds
        self._open_session = session_opener or self._streamable_http_session

    def discover(self) -> list[ToolSpec]:
        """List the server's tools as remote `ToolSpec`s."""

        return _run_sync(self.adiscover())

    async def adiscover(self) -> list[ToolSpec]:
        tools = await self._list_tools()
        specs = [
            ToolSpec(
                name=tool.name,
                description=tool.description or "",
                args_schema=dict(tool.inputSchema or {"type": "object", "properties": {}}),
                handler=self._build_handler(tool.name),
                async_handler=self._build_async_handler(tool.name),
                origin="remote",
                tags=["mcp"],
            )
            for tool in tools
        ]
        logger.info("Discovered %d remote tool(s) at %s", len(specs), self.url)
        return specs

    def call(self, name: str, arguments: dict[str, Any]) -> str:
        return _run_sync(self.acall(name, arguments))

    async def acall(self, name: str, arguments: dict[str, Any]) -> str:
        return await self._call_tool(name, arguments)

    def _build_handler(self, name: str) -> Callable[[dict[str, Any]], str]:
        def _handler(payload: dict[str, Any]) -> str:
            return self.call(name, payload)

        return _handler

    def _build_async_handler(self, name: str) -> Callable[[dict[str, Any]], Awaitable[str]]:
        async def _handler(payload: dict[str, Any]) -> str:
            return await self.acall(name, payload)

        return _handler

    async def _list_tools(self) -> list[Any]:
        async with self._open_session() as session:
            result = await session.list_tools()
        return list(result.tools)

    async def _call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        async with self._open_session() as session:
            result = await session.call_tool(name, arguments)
        text = _render_content(result.content)
        if getattr(result, "isError", False):
            logger.warning("Remote tool %s reported an error: %s", name, text[:200])
        return text

    @asynccontextmanager
    async def _streamable_http_session(self) -> AsyncIterator[ClientSession]:
        async with streamablehttp_client(
            self.url,
            timeout=self._timeout_seconds,
            httpx_client_factory=self._client_factory,
        ) as (read_stream, write_stream, _):
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                yield session

    def _client_factory(
        self,
        headers: dict[str, str] | None = None,
        timeout: httpx.Timeout | None = None,
        auth: httpx.Auth | None = None,
    ) -> httpx.AsyncClient:
        event_hooks: dict[str, list[Any]] = {"request": [self._injector]} if self._injector else {}
        return httpx.AsyncClient(
            headers=headers,
            timeout=timeout or httpx.Timeout(self._timeout_seconds),
            auth=auth,
            follow_redirects=True,
            event_hooks=event_hooks,
        )


def register_remote_tools(registry: ToolRegistry, provider: McpToolProvider) -> int:
    """Register every tool the provider discovers; returns how many."""

    specs = provider.discover()
    for spec in specs:
        registry.register(spec)
    return len(specs)


def _render_content(content: list[Any]) -> str:
    parts: list[str] = []
    for item in content:
        text = getattr(item, "text", None)
        parts.append(str(text) if text is not None else str(item))
    return "\n".join(parts)


def _run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run `coro` to completion from sync code.

    Without a running loop this is `asyncio.run`; inside one the coroutine gets
    its own loop on a worker thread.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="mcp-client") as pool:
        return pool.submit(asyncio.run, coro).result()
