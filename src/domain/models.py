"""
domain.models - Value objects shared by the dispatcher, adapter and orchestrator.

These are plain data containers with no dependencies on infrastructure
(no OpenAI SDK, no LangChain).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Tool calls
# ---------------------------------------------------------------------------

class ToolCallKind(str, Enum):
    """How a tool call was requested by the upstream service."""

    FUNCTION = "function_call"
    WEB_SEARCH = "web_search_call"
    CODE_INTERPRETER = "code_interpreter_call"
    FILE_SEARCH = "file_search_call"
    COMPUTER = "computer_call"

    @property
    def is_hosted(self) -> bool:
        return self is not ToolCallKind.FUNCTION


@dataclass(frozen=True)
class ToolCall:
    """A request to run one capability.

    call_id is set only for calls returned by the upstream service; it keys
    the matching function_call_output item in the synthesis round-trip.
    """
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    kind: ToolCallKind = ToolCallKind.FUNCTION
    call_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "arguments": self.arguments,
            "type": self.kind.value,
        }
        if self.call_id:
            data["call_id"] = self.call_id
        return data


# Hosted call kind -> the capability name it is reported under
HOSTED_TOOL_NAMES: dict[ToolCallKind, str] = {
    ToolCallKind.WEB_SEARCH: "web_search",
    ToolCallKind.CODE_INTERPRETER: "code_interpreter",
    ToolCallKind.FILE_SEARCH: "file_search",
    ToolCallKind.COMPUTER: "computer_use",
}


# ---------------------------------------------------------------------------
# Normalized upstream response
# ---------------------------------------------------------------------------

class OutputType(str, Enum):
    """Discriminant of a decoded upstream response."""

    MESSAGE = "message"
    TOOL_CALLS = "tool_calls"
    HOSTED_CALL = "hosted_call"
    UNKNOWN = "unknown"


NO_CONTENT = "No response content available"


@dataclass(frozen=True)
class UpstreamResponse:
    """Upstream output decoded once at the adapter boundary.

    Downstream code reads output_type / content / tool_calls and never
    touches the raw SDK object again (kept in `raw` for debugging only).
    """
    output_type: OutputType
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    structured_output: Optional[Any] = None
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def function_calls(self) -> list[ToolCall]:
        return [c for c in self.tool_calls if c.kind is ToolCallKind.FUNCTION]

    @property
    def hosted_calls(self) -> list[ToolCall]:
        return [c for c in self.tool_calls if c.kind.is_hosted]


# ---------------------------------------------------------------------------
# Final agent response
# ---------------------------------------------------------------------------

@dataclass
class AgentResponse:
    """What the orchestrator hands back for one message."""
    content: str
    structured_output: Optional[Any] = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "response": self.content,
            "tool_calls": [c.to_dict() for c in self.tool_calls],
            "tool_results": self.tool_results,
        }
        if self.structured_output is not None:
            data["structured_output"] = self.structured_output
        return data
