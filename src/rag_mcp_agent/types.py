"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(slots=True)
class Document:
    """A unit of ingested content.

    `score` stays `None` for documents produced by readers and is populated by
    the vector store on retrieval only.
    """

    doc_id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    score: float | None = None


class ToolErrorKind(str, Enum):
    INVALID_TIMEZONE = "invalid_timezone"


@dataclass(slots=True)
class ToolResult:
    """Tagged tool output: success text, or an error kind with its message."""

    text: str
    error: ToolErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str:
        return self.text


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
