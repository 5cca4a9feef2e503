"""
agent.tools.registry - Tool registration, discovery, and invocation.

Central registry that manages all local capabilities. Built once by the
factory, then shared read-only by the dispatcher, the orchestrator and
the upstream protocol adapter.

Registration is keyed by name and last-write-wins: registering a second
tool under an existing name replaces the first (and logs a warning), while
keeping the original position in the listing order.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterator

from pydantic import ValidationError

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult
from domain.exceptions import DomainError, UnknownToolError

logger = logging.getLogger(__name__)


def strict_json_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Rewrite a JSON schema into the strict form the upstream service accepts.

    Every object gets additionalProperties=false and lists all of its
    properties as required. Pydantic's cosmetic "title" and "default" keys
    are dropped since strict mode rejects them.
    """
    fixed = copy.deepcopy(schema)
    _strictify(fixed)
    return fixed


def _strictify(node: Any) -> None:
    if isinstance(node, list):
        for item in node:
            _strictify(item)
        return
    if not isinstance(node, dict):
        return
    node.pop("title", None)
    node.pop("default", None)
    if node.get("type") == "object" or "properties" in node:
        node["additionalProperties"] = False
        props = node.get("properties") or {}
        node["required"] = list(props.keys())
        for prop in props.values():
            _strictify(prop)
    for key in ("items", "anyOf", "allOf", "oneOf"):
        if key in node:
            _strictify(node[key])
    for sub in (node.get("$defs") or {}).values():
        _strictify(sub)


def describe_function(name: str, description: str, parameters: dict[str, Any]) -> dict[str, Any]:
    """Build one function-tool declaration in the upstream wire format."""
    return {
        "type": "function",
        "name": name,
        "description": description,
        "parameters": strict_json_schema(parameters),
        "strict": True,
    }


class ToolRegistry:
    """Manages tool registration and invocation."""

    def __init__(self):
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool by its name (last registration wins)."""
        if tool.name in self._tools:
            logger.warning("Tool '%s' re-registered; replacing previous executor", tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def get(self, name: str) -> BaseTool | None:
        """Get a tool by name, or None when it is not registered."""
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def all(self) -> list[BaseTool]:
        """Return all registered tools in registration order."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        """Return all registered tool names."""
        return list(self._tools.keys())

    def describe_for_upstream(self) -> list[dict[str, Any]]:
        """Strict function-tool declarations for every registered tool."""
        return [
            describe_function(
                tool.name,
                tool.description,
                tool.get_schema().model_json_schema(),
            )
            for tool in self._tools.values()
        ]

    async def invoke(
        self,
        name: str,
        ctx: RequestContext,
        arguments: dict[str, Any] | None = None,
    ) -> ToolResult:
        """Validate arguments and run a tool.

        Never raises for tool-level problems: validation errors, domain errors
        and unexpected executor failures all come back as a failed ToolResult
        so sibling tool calls in the same request are unaffected.
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.fail(str(UnknownToolError(name)))

        try:
            validated = tool.get_schema().model_validate(arguments or {})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            logger.info("Invalid arguments for tool '%s': %s", name, problems)
            return ToolResult.fail(f"Invalid arguments for {name}: {problems}")

        try:
            return await tool.execute(ctx, **validated.model_dump())
        except DomainError as e:
            logger.info("Tool '%s' failed: %s", name, e)
            return ToolResult.fail(str(e))
        except Exception as e:
            logger.exception("Tool '%s' raised unexpectedly", name)
            return ToolResult.fail(f"{name} failed: {e}")
