"""
agent.tools.search_web - Mock web search used by the search workflow.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult


class SearchWebInput(BaseModel):
    """Input schema for the search_web tool."""
    query: str = Field(min_length=1, description="The search query to look up")
    max_results: int = Field(
        default=5, ge=1, le=20,
        description="Maximum number of results to return",
    )


class SearchWebTool(BaseTool):
    """Search the web for current information on a topic."""

    name = "search_web"
    description = "Search the web for current information on a topic"

    def get_schema(self) -> type[BaseModel]:
        return SearchWebInput

    async def execute(
        self,
        ctx: RequestContext,
        query: str = "",
        max_results: int = 5,
        **kwargs,
    ) -> ToolResult:
        results = [
            {
                "title": f'Result {i + 1} for "{query}"',
                "url": f"https://example.com/result-{i + 1}",
                "snippet": f'This is a mock search result for "{query}".',
            }
            for i in range(max_results)
        ]
        return ToolResult.ok({
            "query": query,
            "results": results,
            "total_results": max_results,
        })
