"""
agent.tools.base - Base tool interface and result container.

All agent tools inherit from BaseTool and return ToolResult.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel

from application.context import RequestContext


@dataclass(frozen=True)
class ToolResult:
    """Result returned by a tool or workflow execution.

    success:  False when validation or execution failed.
    data:     Structured payload (dict) produced by the tool.
    error:    Human-readable failure description when success is False.
    """
    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> ToolResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> ToolResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        payload: dict[str, Any] = {"success": True}
        if isinstance(self.data, dict):
            payload.update(self.data)
        elif self.data is not None:
            payload["result"] = self.data
        return payload

    @property
    def output(self) -> str:
        """JSON string handed back to the upstream service."""
        return json.dumps(self.to_dict(), default=str)


class BaseTool(ABC):
    """Abstract base for all agent tools."""

    name: str
    description: str
    # True for wrappers that delegate to an upstream hosted capability
    hosted: bool = False

    @abstractmethod
    async def execute(self, ctx: RequestContext, **kwargs) -> ToolResult:
        """Execute the tool with the given request context and validated arguments."""
        ...

    @abstractmethod
    def get_schema(self) -> type[BaseModel]:
        """Return the Pydantic schema for this tool's input arguments."""
        ...
