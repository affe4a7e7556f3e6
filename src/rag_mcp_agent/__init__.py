"""RAG MCP Agent package."""

from .config import AgentConfig, RetrievalConfig, Settings

__all__ = ["AgentConfig", "RetrievalConfig", "Settings"]
