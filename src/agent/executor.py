"""
agent.executor - Request orchestration.

The Orchestrator takes one message in and hands one AgentResponse out.
It never builds its collaborators (factory.py does) and keeps no state
between requests apart from references to the shared registry, workflow
runner and feature-flag holder.

Two strategies, chosen at construction:

    deterministic   IntentDispatcher picks a local capability, the answer is
                    a fixed template; unmatched messages go to the chat model.
    model           The upstream service selects tools, they run locally in
                    the order returned, and a second round-trip turns the
                    results into the final answer.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from application.context import RequestContext
from application.dto import AgentOptions, AvailableTools
from application.feature_flags import FeatureFlags, FeatureFlagSnapshot
from agent.dispatcher import DispatchDecision, IntentDispatcher
from agent.prompt import (
    format_calculation,
    format_code_execution,
    format_file_search,
    format_weather,
    format_web_search,
)
from agent.tools.base import ToolResult
from agent.tools.registry import ToolRegistry
from agent.workflows.runner import WorkflowRunner
from domain.models import (
    HOSTED_TOOL_NAMES,
    NO_CONTENT,
    AgentResponse,
    OutputType,
    ToolCall,
    ToolCallKind,
)
from domain.exceptions import UnknownToolError
from domain.ports import ResponsesPort, TextGeneratorPort

logger = logging.getLogger(__name__)

MODE_DETERMINISTIC = "deterministic"
MODE_MODEL = "model"
AGENT_MODES = (MODE_DETERMINISTIC, MODE_MODEL)

# intent -> (template, label used in "<label> failed: ...")
_TEMPLATES: dict[str, tuple[Callable[[dict[str, Any]], str], str]] = {
    "file_search": (format_file_search, "File search"),
    "web_search": (format_web_search, "Web search"),
    "code": (format_code_execution, "Code execution"),
    "calculation": (format_calculation, "Calculation"),
    "weather": (format_weather, "Weather lookup"),
}

# Hosted capability name -> flag that offers it upstream
_HOSTED_FLAGS: dict[str, str] = {
    HOSTED_TOOL_NAMES[ToolCallKind.WEB_SEARCH]: "hosted_search",
    HOSTED_TOOL_NAMES[ToolCallKind.CODE_INTERPRETER]: "sandboxed_execution",
    HOSTED_TOOL_NAMES[ToolCallKind.FILE_SEARCH]: "document_retrieval",
    HOSTED_TOOL_NAMES[ToolCallKind.COMPUTER]: "remote_device_control",
}


class Orchestrator:
    """Top-level entry point: one message in, one AgentResponse out.

    Constructed by factory.py with all dependencies injected.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        workflows: WorkflowRunner,
        flags: FeatureFlags,
        dispatcher: IntentDispatcher | None = None,
        generator: Optional[TextGeneratorPort] = None,
        responses: Optional[ResponsesPort] = None,
        mode: str = MODE_DETERMINISTIC,
    ):
        if mode not in AGENT_MODES:
            raise ValueError(f"Unknown agent mode '{mode}'. Expected one of {AGENT_MODES}")
        if mode == MODE_MODEL and responses is None:
            raise ValueError("Model mode needs a Responses client")
        self._registry = registry
        self._workflows = workflows
        self._flags = flags
        self._dispatcher = dispatcher or IntentDispatcher()
        self._generator = generator
        self._responses = responses
        self._mode = mode

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def flags(self) -> FeatureFlags:
        return self._flags

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def run_agent(self, message: str, options: AgentOptions | None = None) -> AgentResponse:
        """Process one user message.

        Tool and workflow failures end up inside the response. Upstream
        service failures (UpstreamServiceError) propagate to the caller.
        """
        ctx = RequestContext(message=message, flags=self._flags.snapshot())
        logger.info(
            "simple_agent_started: request=%s mode=%s message=%s",
            ctx.request_id, self._mode, message[:80],
        )
        try:
            if self._mode == MODE_MODEL:
                response = await self._run_model(ctx, options)
            else:
                response = await self._run_deterministic(ctx, options)
        except Exception as e:
            logger.error("simple_agent_error: request=%s error=%s", ctx.request_id, e)
            raise

        logger.info(
            "simple_agent_completed: request=%s has_response=%s tool_count=%d",
            ctx.request_id, bool(response.content), len(response.tool_calls),
        )
        return response

    # ------------------------------------------------------------------
    # Deterministic strategy
    # ------------------------------------------------------------------

    async def _run_deterministic(
        self, ctx: RequestContext, options: AgentOptions | None,
    ) -> AgentResponse:
        decision = self._dispatcher.classify(ctx.message)
        if decision.error:
            return AgentResponse(content=decision.error)
        if decision.is_fallback:
            return await self._chat(ctx, options)

        call = self._local_call(ctx.flags, decision)
        result = await self._registry.invoke(call.name, ctx, call.arguments)
        template, label = _TEMPLATES[decision.intent]
        if result.success:
            content = template(result.data)
        else:
            content = f"{label} failed: {result.error}"
        return AgentResponse(
            content=content,
            tool_calls=[call],
            tool_results=[_tool_result_entry(call.name, result.to_dict())],
        )

    def _local_call(self, flags: FeatureFlagSnapshot, decision: DispatchDecision) -> ToolCall:
        call = decision.to_tool_call()
        hosted_unavailable = not flags.hosted_search or call.name not in self._registry
        if call.name == "web_search" and hosted_unavailable and "search_web" in self._registry:
            return ToolCall(name="search_web", arguments=call.arguments)
        return call

    async def _chat(self, ctx: RequestContext, options: AgentOptions | None) -> AgentResponse:
        if self._generator is None:
            logger.warning("No chat model configured; cannot answer free-form message")
            return AgentResponse(content=NO_CONTENT)

        options = options or AgentOptions()
        spec = options.structured_output
        if spec is not None and ctx.flags.structured_output:
            structured = await self._generator.generate_structured(
                ctx.message, spec.schema, name=spec.name,
            )
            return AgentResponse(
                content=json.dumps(structured, default=str),
                structured_output=structured,
            )
        if spec is not None:
            logger.info("Structured output '%s' requested but the flag is disabled; ignoring", spec.name)

        content = await self._generator.generate(
            ctx.message,
            temperature=options.temperature,
            max_tokens=options.max_output_tokens,
            top_p=options.top_p,
        )
        return AgentResponse(content=content or NO_CONTENT)

    # ------------------------------------------------------------------
    # Model-driven strategy
    # ------------------------------------------------------------------

    async def _run_model(self, ctx: RequestContext, options: AgentOptions | None) -> AgentResponse:
        upstream = await self._responses.ask(
            ctx.message,
            ctx.flags,
            options,
            extra_tools=self._workflows.describe_for_upstream(),
        )

        if upstream.output_type in (OutputType.MESSAGE, OutputType.UNKNOWN):
            return AgentResponse(
                content=upstream.content or NO_CONTENT,
                structured_output=upstream.structured_output,
            )

        # Sequential, in upstream order; one failure never aborts the rest
        tool_results: list[dict[str, Any]] = []
        function_calls: list[ToolCall] = []
        function_outputs: list[dict[str, Any]] = []
        for call in upstream.tool_calls:
            output = await self.execute_call(ctx, call)
            tool_results.append(_tool_result_entry(call.name, output))
            if call.kind is ToolCallKind.FUNCTION:
                function_calls.append(call)
                function_outputs.append(output)

        if not function_calls:
            # Hosted-only: the upstream service already produced the answer
            return AgentResponse(
                content=upstream.content or NO_CONTENT,
                tool_calls=list(upstream.tool_calls),
                tool_results=tool_results,
            )

        synthesis = await self._responses.synthesize(
            ctx.message, function_calls, function_outputs, ctx.flags, options,
        )
        return AgentResponse(
            content=synthesis.content or NO_CONTENT,
            structured_output=synthesis.structured_output,
            tool_calls=list(upstream.tool_calls),
            tool_results=tool_results,
        )

    async def execute_call(self, ctx: RequestContext, call: ToolCall) -> dict[str, Any]:
        """Resolve one call (registry, then workflows, then hosted table) and run it."""
        if call.kind.is_hosted:
            return _hosted_result(call)
        if call.name in self._registry:
            result = await self._registry.invoke(call.name, ctx, call.arguments)
            return result.to_dict()
        if call.name in self._workflows:
            result = await self._workflows.run(call.name, ctx, call.arguments)
            return result.to_dict()
        if call.name in _HOSTED_FLAGS:
            return _hosted_result(call)
        logger.warning("Upstream requested unknown tool '%s'", call.name)
        return ToolResult.fail(str(UnknownToolError(call.name))).to_dict()

    # ------------------------------------------------------------------
    # Listings, flags and workflow entry points
    # ------------------------------------------------------------------

    def get_available_tools(self) -> AvailableTools:
        flags = self._flags.snapshot()
        return AvailableTools(
            custom_tools=[t.name for t in self._registry if not t.hosted],
            built_in_tools=[n for n, flag in _HOSTED_FLAGS.items() if getattr(flags, flag)],
            workflows=self._workflows.names(),
            feature_flags=flags.as_dict(),
        )

    def describe_tools(self) -> list[dict[str, Any]]:
        """Every local function and workflow declaration as sent upstream."""
        return self._registry.describe_for_upstream() + self._workflows.describe_for_upstream()

    def enable_flag(self, name: str) -> dict[str, bool]:
        return self._flags.enable(name).as_dict()

    def disable_flag(self, name: str) -> dict[str, bool]:
        return self._flags.disable(name).as_dict()

    def toggle_flag(self, name: str) -> dict[str, bool]:
        return self._flags.toggle(name).as_dict()

    async def run_weather_workflow(self, location: str, unit: str = "fahrenheit") -> ToolResult:
        ctx = RequestContext(message=f"weather_workflow: {location}", flags=self._flags.snapshot())
        return await self._workflows.run_weather(ctx, location, unit)

    async def run_search_workflow(self, query: str) -> ToolResult:
        ctx = RequestContext(message=f"search_workflow: {query}", flags=self._flags.snapshot())
        return await self._workflows.run_search(ctx, query)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _tool_result_entry(name: str, result: dict[str, Any]) -> dict[str, Any]:
    return {"name": name, "result": result}


def _hosted_result(call: ToolCall) -> dict[str, Any]:
    """Hosted calls already ran upstream; record them, never re-execute."""
    return {"success": True, "hosted": True, "type": call.kind.value, **call.arguments}
