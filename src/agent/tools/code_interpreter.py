"""
agent.tools.code_interpreter - Run code in the upstream sandboxed container.

The container itself is provisioned lazily (once) by the protocol adapter;
this tool only forwards the code.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult
from domain.exceptions import UpstreamServiceError
from domain.ports import HostedToolPort

logger = logging.getLogger(__name__)


class CodeInterpreterInput(BaseModel):
    """Input schema for the code_interpreter tool."""
    code: str = Field(min_length=1, description="Code to execute or analyze")


class CodeInterpreterTool(BaseTool):
    """Execute and analyze code using the hosted code interpreter."""

    name = "code_interpreter"
    description = "Execute and analyze code using the hosted code interpreter"
    hosted = True

    def __init__(self, hosted: HostedToolPort):
        self._hosted = hosted

    def get_schema(self) -> type[BaseModel]:
        return CodeInterpreterInput

    async def execute(self, ctx: RequestContext, code: str = "", **kwargs) -> ToolResult:
        if not ctx.flags.sandboxed_execution:
            return ToolResult.fail("Sandboxed code execution is disabled")
        try:
            text = await self._hosted.run_hosted_tool(
                "code_interpreter", f"Execute this code: {code}",
            )
        except UpstreamServiceError as e:
            logger.warning("Code execution failed: %s", e)
            return ToolResult.fail(f"Failed to execute code: {e}")
        return ToolResult.ok({"code": code, "results": text or "No execution results found"})
