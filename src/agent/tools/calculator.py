"""
agent.tools.calculator - Arithmetic tool.

Evaluates expressions with the restricted parser in domain.arithmetic;
user text is never passed to eval().
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult
from domain.arithmetic import evaluate, format_number


class CalculateInput(BaseModel):
    """Input schema for the calculate tool."""
    expression: str = Field(
        description="Mathematical expression to evaluate, e.g. '2 + 2 * 3'",
    )


class CalculateTool(BaseTool):
    """Perform mathematical calculations."""

    name = "calculate"
    description = "Perform mathematical calculations"

    def get_schema(self) -> type[BaseModel]:
        return CalculateInput

    async def execute(self, ctx: RequestContext, expression: str = "", **kwargs) -> ToolResult:
        result = format_number(evaluate(expression))
        return ToolResult.ok({"expression": expression, "result": result})
