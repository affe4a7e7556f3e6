"""FastAPI entrypoint for agent, ingest, upload and verification endpoints."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from rag_mcp_agent.config import settings
from rag_mcp_agent.obs.logger import get_logger
from rag_mcp_agent.runtime import AgentRuntime, build_runtime

logger = get_logger(__name__)

UPLOAD_OK_MESSAGE = "File uploaded and processed successfully."
UPLOAD_FAILED_MESSAGE = "Failed to process the file."


class UserQuery(BaseModel):
    query: str


def _runtime(request: Request) -> AgentRuntime:
    return request.app.state.runtime


def _ingest_on_startup(runtime: AgentRuntime) -> None:
    logger.info("Agent service started. Ingesting documents...")
    try:
        status = runtime.ingestion.ingest_document(None)
        logger.info("Document ingestion completed: %s", status.value)
    except Exception:
        logger.exception("Error during document ingestion")


def create_app(runtime: AgentRuntime | None = None) -> FastAPI:
    """Build the app around `runtime`, or around one wired from global settings."""

    runtime = runtime or build_runtime(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if runtime.settings.ingest_on_startup:
            _ingest_on_startup(runtime)
        yield

    app = FastAPI(title="RAG MCP Agent", version="0.1.0", lifespan=lifespan)
    app.state.runtime = runtime

    @app.get("/health")
    def health(rt: AgentRuntime = Depends(_runtime)) -> dict[str, Any]:
        return {
            "status": "ok",
            "llm_configured": rt.llm_configured,
            "agent_mode": "langchain" if rt.llm_configured else "offline",
        }

    @app.get("/api/agent")
    def agent_capabilities(rt: AgentRuntime = Depends(_runtime)) -> dict[str, Any]:
        logger.info("Agent capabilities endpoint called")
        return rt.agent.describe()

    @app.post("/api/agent", response_class=PlainTextResponse)
    def agent_endpoint(user_query: UserQuery, rt: AgentRuntime = Depends(_runtime)) -> str:
        logger.info("Agent endpoint called with %s", user_query.query)
        return rt.agent.ask(user_query.query)

    @app.get("/api/ingest", response_class=PlainTextResponse)
    @app.get("/api/ingest/{file_name}", response_class=PlainTextResponse)
    def ingest(file_name: str | None = None, rt: AgentRuntime = Depends(_runtime)) -> str:
        return rt.ingestion.ingest_document(file_name).value

    @app.post("/api/upload", response_class=PlainTextResponse)
    def upload(file: UploadFile = File(...), rt: AgentRuntime = Depends(_runtime)) -> PlainTextResponse:
        try:
            content = file.file.read()
            rt.ingestion.ingest_bytes(content, file.filename or "")
        except Exception:
            logger.exception("Failed to process uploaded file %s", file.filename)
            return PlainTextResponse(UPLOAD_FAILED_MESSAGE, status_code=500)
        return PlainTextResponse(UPLOAD_OK_MESSAGE)

    @app.post("/api/verify-ingest", response_class=PlainTextResponse)
    def verify_ingest(user_query: UserQuery, rt: AgentRuntime = Depends(_runtime)) -> str:
        return rt.ingestion.verify(user_query.query)

    return app
