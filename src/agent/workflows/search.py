"""
agent.workflows.search - Web search followed by a model-written summary.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.prompt import SEARCH_SYSTEM_PROMPT, search_summary_prompt
from agent.tools.base import ToolResult
from agent.tools.registry import ToolRegistry
from agent.workflows.base import BaseWorkflow
from domain.exceptions import UpstreamServiceError
from domain.ports import TextGeneratorPort

logger = logging.getLogger(__name__)

_SEARCH_RESULTS = 5
_SUMMARY_TEMPERATURE = 0.3


class SearchWorkflowInput(BaseModel):
    """Input schema for search_workflow."""
    query: str = Field(min_length=1, description="The search query")


class SearchWorkflow(BaseWorkflow):
    """Perform a search and generate a summary."""

    name = "search_workflow"
    description = "Search the web and get summarized results"

    def __init__(self, registry: ToolRegistry, generator: Optional[TextGeneratorPort] = None):
        self._registry = registry
        self._generator = generator

    def get_schema(self) -> type[BaseModel]:
        return SearchWorkflowInput

    async def run(self, ctx: RequestContext, query: str = "", **kwargs) -> ToolResult:
        logger.info("search_workflow_started: query=%s", query[:80])

        search = await self._registry.invoke(
            "search_web", ctx, {"query": query, "max_results": _SEARCH_RESULTS},
        )
        if not search.success:
            return ToolResult.fail(f"Search failed: {search.error}")
        logger.debug("search_results_retrieved: %d", len(search.data.get("results", [])))

        if self._generator is None:
            return ToolResult.fail("Search summary unavailable: no chat model is configured")

        try:
            summary = await self._generator.generate(
                search_summary_prompt(query, search.data),
                system=SEARCH_SYSTEM_PROMPT,
                temperature=_SUMMARY_TEMPERATURE,
            )
        except UpstreamServiceError as e:
            return ToolResult.fail(f"Search summary failed: {e}")

        logger.info("search_workflow_completed: query=%s", query[:80])
        return ToolResult.ok({
            "query": query,
            "search_results": search.data,
            "summary": summary,
        })
