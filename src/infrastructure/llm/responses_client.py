"""
infrastructure.llm.responses_client - Protocol adapter for the upstream Responses API.

Implements ResponsesPort and HostedToolPort on top of openai.AsyncOpenAI.

Outbound: assembles the tool list (hosted tools per feature flags, then the
registry's strict function declarations, then caller extras) and forwards
only the generation parameters the caller actually set.

Inbound: decodes the heterogeneous `response.output` items exactly once
into an UpstreamResponse (message / tool_calls / hosted_call / unknown).
Unrecognised shapes degrade to NO_CONTENT and are logged, never raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from application.dto import AgentOptions
from application.feature_flags import FeatureFlagSnapshot
from agent.tools.registry import ToolRegistry
from domain.exceptions import DomainError, UpstreamServiceError
from domain.models import (
    HOSTED_TOOL_NAMES,
    NO_CONTENT,
    OutputType,
    ToolCall,
    ToolCallKind,
    UpstreamResponse,
)
from infrastructure.llm.remote_resources import LazyResource

logger = logging.getLogger(__name__)

_IGNORED_ITEM_TYPES = {"reasoning"}


class ResponsesClient:
    """Talks to the upstream language-model service.

    One instance per process: it owns the memoized container and vector
    store handles, so hosted tools never re-provision per request.
    """

    def __init__(
        self,
        client: Any,
        registry: ToolRegistry,
        *,
        model: str,
        container: LazyResource,
        vector_store: LazyResource,
        instructions: Optional[str] = None,
        synthesis_instructions: Optional[str] = None,
        display_size: tuple[int, int] = (1024, 768),
        computer_environment: str = "browser",
    ):
        self._client = client
        self._registry = registry
        self._model = model
        self._container = container
        self._vector_store = vector_store
        self._instructions = instructions
        self._synthesis_instructions = synthesis_instructions
        self._display_size = display_size
        self._computer_environment = computer_environment

    @property
    def model(self) -> str:
        return self._model

    @property
    def instructions(self) -> Optional[str]:
        return self._instructions

    @instructions.setter
    def instructions(self, value: Optional[str]) -> None:
        self._instructions = value

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    async def build_tools(
        self,
        flags: FeatureFlagSnapshot,
        extra_tools: Sequence[dict[str, Any]] = (),
    ) -> list[dict[str, Any]]:
        """Hosted tools enabled by `flags`, then local functions, then extras."""
        tools: list[dict[str, Any]] = []
        if flags.hosted_search:
            tools.append(await self._hosted_spec("web_search"))
        if flags.sandboxed_execution:
            tools.append(await self._hosted_spec("code_interpreter"))
        if flags.document_retrieval:
            tools.append(await self._hosted_spec("file_search"))
        if flags.remote_device_control:
            tools.append(await self._hosted_spec("computer_use"))

        tools.extend(self._registry.describe_for_upstream())
        tools.extend(extra_tools)
        return tools

    async def _hosted_spec(self, kind: str) -> dict[str, Any]:
        if kind == "web_search":
            return {"type": "web_search_preview"}
        if kind == "code_interpreter":
            return {"type": "code_interpreter", "container": await self._container.get()}
        if kind == "file_search":
            return {"type": "file_search", "vector_store_ids": [await self._vector_store.get()]}
        if kind == "computer_use":
            width, height = self._display_size
            return {
                "type": "computer_use_preview",
                "display_width": width,
                "display_height": height,
                "environment": self._computer_environment,
            }
        raise ValueError(f"Unknown hosted tool kind: {kind}")

    def build_request(
        self,
        input: Any,
        tools: list[dict[str, Any]],
        flags: FeatureFlagSnapshot,
        options: AgentOptions | None = None,
        instructions: Optional[str] = None,
    ) -> dict[str, Any]:
        """Assemble the keyword arguments for responses.create()."""
        request: dict[str, Any] = {"model": self._model, "input": input}
        if tools:
            request["tools"] = tools
        if instructions:
            request["instructions"] = instructions
        if options is None:
            return request

        request.update(options.generation_params())
        spec = options.structured_output
        if spec is not None:
            if flags.structured_output:
                request["text"] = {
                    "format": {
                        "type": "json_schema",
                        "name": spec.name,
                        "schema": spec.schema,
                        "strict": True,
                    }
                }
            else:
                logger.info(
                    "Structured output '%s' requested but the flag is disabled; ignoring",
                    spec.name,
                )
        return request

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    async def ask(
        self,
        message: str,
        flags: FeatureFlagSnapshot,
        options: AgentOptions | None = None,
        extra_tools: Sequence[dict[str, Any]] = (),
    ) -> UpstreamResponse:
        """Send a message with all declared tools and decode the reply."""
        tools = await self.build_tools(flags, extra_tools)
        request = self.build_request(message, tools, flags, options, self._instructions)
        response = await self._create(request)
        return parse_response(response)

    async def synthesize(
        self,
        message: str,
        tool_calls: Sequence[ToolCall],
        tool_outputs: Sequence[dict[str, Any]],
        flags: FeatureFlagSnapshot,
        options: AgentOptions | None = None,
    ) -> UpstreamResponse:
        """Second round-trip: let the model answer from the tool results.

        `tool_outputs[i]` is the result of `tool_calls[i]`; every pair is
        sent, in order, so the model sees the complete result set.
        """
        if len(tool_calls) != len(tool_outputs):
            raise ValueError("tool_calls and tool_outputs must be the same length")

        items: list[dict[str, Any]] = [{"role": "user", "content": message}]
        for call in tool_calls:
            items.append({
                "type": "function_call",
                "call_id": call.call_id,
                "name": call.name,
                "arguments": json.dumps(call.arguments),
            })
        for call, output in zip(tool_calls, tool_outputs):
            items.append({
                "type": "function_call_output",
                "call_id": call.call_id,
                "output": json.dumps(output, default=str),
            })

        request = self.build_request(
            items, [], flags, options, self._synthesis_instructions,
        )
        response = await self._create(request)
        return parse_response(response)

    async def run_hosted_tool(self, kind: str, prompt: str) -> str:
        """Run one hosted tool directly and return the text it produced."""
        tool = await self._hosted_spec(kind)
        response = await self._create({
            "model": self._model,
            "input": [{"role": "user", "content": prompt}],
            "tools": [tool],
        })
        decoded = parse_response(response)
        return "" if decoded.output_type is OutputType.UNKNOWN else decoded.content

    async def _create(self, request: dict[str, Any]) -> Any:
        try:
            return await self._client.responses.create(**request)
        except DomainError:
            raise
        except Exception as e:
            logger.error("Upstream request failed (model=%s): %s", self._model, e)
            raise UpstreamServiceError(f"Upstream service request failed: {e}") from e


# ---------------------------------------------------------------------------
# Response decoding
# ---------------------------------------------------------------------------

def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from an SDK model or a plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _message_text(item: Any) -> str:
    parts = []
    for block in _get(item, "content") or []:
        if _get(block, "type") == "output_text":
            parts.append(_get(block, "text", ""))
    return "".join(parts)


def _decode_arguments(raw: Any, name: str) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.warning("Could not decode arguments for function '%s': %r", name, raw)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _hosted_query(item: Any) -> Optional[str]:
    action = _get(item, "action")
    query = _get(action, "query")
    if query:
        return query
    queries = _get(item, "queries") or []
    return queries[0] if queries else None


def _decode_item(item: Any) -> Optional[ToolCall]:
    item_type = _get(item, "type")
    item_id = _get(item, "call_id") or _get(item, "id")

    if item_type == ToolCallKind.FUNCTION.value:
        name = _get(item, "name", "")
        return ToolCall(
            name=name,
            arguments=_decode_arguments(_get(item, "arguments"), name),
            kind=ToolCallKind.FUNCTION,
            call_id=item_id,
        )
    if item_type == ToolCallKind.WEB_SEARCH.value:
        return ToolCall(
            name=HOSTED_TOOL_NAMES[ToolCallKind.WEB_SEARCH],
            arguments={"query": _hosted_query(item)},
            kind=ToolCallKind.WEB_SEARCH,
            call_id=item_id,
        )
    if item_type == ToolCallKind.CODE_INTERPRETER.value:
        code = _get(item, "code") or _get(_get(item, "action"), "code")
        return ToolCall(
            name=HOSTED_TOOL_NAMES[ToolCallKind.CODE_INTERPRETER],
            arguments={"code": code},
            kind=ToolCallKind.CODE_INTERPRETER,
            call_id=item_id,
        )
    if item_type == ToolCallKind.FILE_SEARCH.value:
        return ToolCall(
            name=HOSTED_TOOL_NAMES[ToolCallKind.FILE_SEARCH],
            arguments={"query": _hosted_query(item)},
            kind=ToolCallKind.FILE_SEARCH,
            call_id=item_id,
        )
    if item_type == ToolCallKind.COMPUTER.value:
        action = _get(item, "action")
        if action is not None and not isinstance(action, dict):
            action = action.model_dump() if hasattr(action, "model_dump") else str(action)
        return ToolCall(
            name=HOSTED_TOOL_NAMES[ToolCallKind.COMPUTER],
            arguments={"action": action},
            kind=ToolCallKind.COMPUTER,
            call_id=item_id,
        )
    return None


def _hosted_summary(call: ToolCall) -> str:
    if call.kind is ToolCallKind.WEB_SEARCH:
        return f"Web search was performed for: {call.arguments.get('query') or 'unknown query'}"
    if call.kind is ToolCallKind.FILE_SEARCH:
        return f"File search was performed for: {call.arguments.get('query') or 'unknown query'}"
    if call.kind is ToolCallKind.CODE_INTERPRETER:
        return "Code interpreter was executed"
    return "Computer action was requested"


def parse_response(response: Any) -> UpstreamResponse:
    """Decode a Responses API result into an UpstreamResponse.

    Never raises: an empty or unrecognised output becomes OutputType.UNKNOWN
    with NO_CONTENT as its content.
    """
    items = _get(response, "output") or []
    texts: list[str] = []
    calls: list[ToolCall] = []

    for item in items:
        item_type = _get(item, "type")
        if item_type == "message":
            text = _message_text(item)
            if text:
                texts.append(text)
            continue
        call = _decode_item(item)
        if call is not None:
            calls.append(call)
        elif item_type not in _IGNORED_ITEM_TYPES:
            logger.warning("Ignoring unrecognised upstream output item type: %r", item_type)

    content = "\n".join(texts)

    if any(c.kind is ToolCallKind.FUNCTION for c in calls):
        return UpstreamResponse(
            output_type=OutputType.TOOL_CALLS,
            content=content,
            tool_calls=calls,
            raw=response,
        )

    if calls:
        return UpstreamResponse(
            output_type=OutputType.HOSTED_CALL,
            content=content or _hosted_summary(calls[0]),
            tool_calls=calls,
            raw=response,
        )

    if content:
        return UpstreamResponse(
            output_type=OutputType.MESSAGE,
            content=content,
            structured_output=_try_structured(content),
            raw=response,
        )

    logger.warning(
        "Upstream response had no usable output (items=%d); returning no-content result",
        len(items),
    )
    return UpstreamResponse(output_type=OutputType.UNKNOWN, content=NO_CONTENT, raw=response)


def _try_structured(text: str) -> Optional[Any]:
    """Return the parsed JSON object/array in `text`, or None for plain prose."""
    stripped = text.strip()
    if not stripped or stripped[0] not in "{[":
        return None
    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, (dict, list)) else None
