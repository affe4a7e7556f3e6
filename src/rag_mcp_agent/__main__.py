"""Serve the agent API with uvicorn: ``python -m rag_mcp_agent``."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "rag_mcp_agent.api.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )


if __name__ == "__main__":
    main()
