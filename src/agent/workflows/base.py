"""
agent.workflows.base - Base interface for multi-step workflows.

A workflow looks like a tool from the outside (name, description, input
schema, ToolResult out) but internally chains registered tools and may
ask the chat model once for an elaboration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from application.context import RequestContext
from agent.tools.base import ToolResult


class BaseWorkflow(ABC):
    """Abstract base for all workflows."""

    name: str
    description: str

    @abstractmethod
    async def run(self, ctx: RequestContext, **kwargs) -> ToolResult:
        """Run the workflow with validated arguments."""
        ...

    @abstractmethod
    def get_schema(self) -> type[BaseModel]:
        """Return the Pydantic schema for this workflow's input."""
        ...
