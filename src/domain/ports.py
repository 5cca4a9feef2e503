"""
domain.ports - Abstract interfaces (Protocols) for the system boundaries.

These define WHAT the agent needs from the upstream language-model service
without specifying HOW. infrastructure/llm provides the concrete adapter;
tools, workflows and the orchestrator depend only on these protocols.

Using typing.Protocol (structural typing) instead of ABC: test doubles
satisfy the port without explicit inheritance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

from domain.models import ToolCall, UpstreamResponse

if TYPE_CHECKING:
    from application.dto import AgentOptions
    from application.feature_flags import FeatureFlagSnapshot


@runtime_checkable
class ResponsesPort(Protocol):
    """Ask the upstream service, optionally letting it pick tools."""

    async def ask(
        self,
        message: str,
        flags: FeatureFlagSnapshot,
        options: AgentOptions | None = None,
        extra_tools: Sequence[dict[str, Any]] = (),
    ) -> UpstreamResponse: ...

    async def synthesize(
        self,
        message: str,
        tool_calls: Sequence[ToolCall],
        tool_outputs: Sequence[dict[str, Any]],
        flags: FeatureFlagSnapshot,
        options: AgentOptions | None = None,
    ) -> UpstreamResponse: ...


@runtime_checkable
class HostedToolPort(Protocol):
    """Run a single hosted (built-in) capability on the upstream service."""

    async def run_hosted_tool(self, kind: str, prompt: str) -> str: ...


@runtime_checkable
class TextGeneratorPort(Protocol):
    """Free-form text generation (fallback chat, workflow synthesis)."""

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        top_p: float | None = None,
    ) -> str: ...

    async def generate_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        name: str = "response",
    ) -> Any: ...
