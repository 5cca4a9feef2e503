"""
agent.tools.web_search - Local wrapper around the upstream hosted web search.

Lets the deterministic dispatcher reach the upstream service's built-in
search as if it were an ordinary capability.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult
from domain.exceptions import UpstreamServiceError
from domain.ports import HostedToolPort

logger = logging.getLogger(__name__)


class WebSearchInput(BaseModel):
    """Input schema for the web_search tool."""
    query: str = Field(
        min_length=1,
        description="Search query to find information on the web",
    )


class WebSearchTool(BaseTool):
    """Search the web through the upstream hosted search."""

    name = "web_search"
    description = "Search the web for current information and news"
    hosted = True

    def __init__(self, hosted: HostedToolPort):
        self._hosted = hosted

    def get_schema(self) -> type[BaseModel]:
        return WebSearchInput

    async def execute(self, ctx: RequestContext, query: str = "", **kwargs) -> ToolResult:
        if not ctx.flags.hosted_search:
            return ToolResult.fail("Hosted web search is disabled")
        try:
            text = await self._hosted.run_hosted_tool(
                "web_search", f"Search the web for: {query}",
            )
        except UpstreamServiceError as e:
            logger.warning("Web search failed for %r: %s", query, e)
            return ToolResult.fail(f"Failed to search the web: {e}")
        return ToolResult.ok({"query": query, "results": text or "No search results found"})
