"""
application.dto - Data Transfer Objects for orchestrator input/output.

These are the structured options and listings that the orchestrator
exchanges with its callers (REST endpoints, CLI adapter).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class StructuredOutputSpec:
    """A caller-supplied JSON schema the answer must conform to."""
    name: str
    schema: dict[str, Any]


@dataclass(frozen=True)
class AgentOptions:
    """Optional generation parameters for one request.

    Every field defaults to None meaning "not provided": unset values are
    omitted from upstream requests, never sent as defaults.
    """
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None
    top_p: Optional[float] = None
    top_logprobs: Optional[int] = None
    parallel_tool_calls: Optional[bool] = None
    structured_output: Optional[StructuredOutputSpec] = None

    def generation_params(self) -> dict[str, Any]:
        """Only the explicitly provided sampling parameters, upstream names."""
        params = {
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
            "top_p": self.top_p,
            "top_logprobs": self.top_logprobs,
            "parallel_tool_calls": self.parallel_tool_calls,
        }
        return {k: v for k, v in params.items() if v is not None}


@dataclass(frozen=True)
class AvailableTools:
    """Listing returned by Orchestrator.get_available_tools()."""
    custom_tools: list[str] = field(default_factory=list)
    built_in_tools: list[str] = field(default_factory=list)
    workflows: list[str] = field(default_factory=list)
    feature_flags: dict[str, bool] = field(default_factory=dict)
