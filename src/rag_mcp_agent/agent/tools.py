"""Built-in local tool implementations."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from rag_mcp_agent.agent.registry import ToolRegistry, ToolSpec
from rag_mcp_agent.types import ToolErrorKind, ToolResult

INVALID_TIMEZONE_MESSAGE = (
    "Invalid country/region provided. Please provide a valid  time zone identifier."
)


class CurrentTimeInput(BaseModel):
    country: str = Field(
        description="IANA time zone identifier, for example 'Europe/London' or 'Asia/Kolkata'."
    )


def current_time(zone_id: str) -> ToolResult:
    """Current date-time in `zone_id`, formatted as ``<iso-8601>[<zone>]``.

    Unknown or malformed identifiers yield an `INVALID_TIMEZONE` result instead
    of an exception.
    """

    try:
        zone = ZoneInfo(zone_id)
    except (KeyError, ValueError, OSError):
        return ToolResult(text=INVALID_TIMEZONE_MESSAGE, error=ToolErrorKind.INVALID_TIMEZONE)
    return ToolResult(text=f"{datetime.now(zone).isoformat()}[{zone.key}]")


def register_builtin_tools(registry: ToolRegistry) -> None:
    """Register the local tool set.

    Tools:
    - `GetCurrentTimeTool`: current time for an IANA time zone identifier.
    """

    def _current_time(input_data: CurrentTimeInput) -> ToolResult:
        return current_time(input_data.country)

    registry.register(
        ToolSpec(
            name="GetCurrentTimeTool",
            description="Get the current time for a specified country",
            args_schema=CurrentTimeInput,
            handler=_current_time,
            tags=["time"],
        )
    )
