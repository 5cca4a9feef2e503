"""
agent.workflows.runner - Resolves and runs workflow pseudo-tools.

The orchestrator consults the runner after the tool registry; the HTTP
gateway calls the direct entry points (run_weather / run_search).
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from application.context import RequestContext
from agent.tools.base import ToolResult
from agent.tools.registry import describe_function
from agent.workflows.base import BaseWorkflow
from domain.exceptions import DomainError, UnknownToolError

logger = logging.getLogger(__name__)


class WorkflowRunner:
    """Holds the named workflows and runs them like capabilities."""

    def __init__(self, workflows: list[BaseWorkflow] | None = None):
        self._workflows: dict[str, BaseWorkflow] = {}
        for workflow in workflows or []:
            self.register(workflow)

    def register(self, workflow: BaseWorkflow) -> None:
        self._workflows[workflow.name] = workflow
        logger.debug("Registered workflow: %s", workflow.name)

    def get(self, name: str) -> BaseWorkflow | None:
        return self._workflows.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._workflows

    def names(self) -> list[str]:
        return list(self._workflows.keys())

    def describe_for_upstream(self) -> list[dict[str, Any]]:
        return [
            describe_function(w.name, w.description, w.get_schema().model_json_schema())
            for w in self._workflows.values()
        ]

    async def run(
        self,
        name: str,
        ctx: RequestContext,
        arguments: dict[str, Any] | None = None,
    ) -> ToolResult:
        """Validate input and run a workflow. Failures come back as ToolResult."""
        workflow = self._workflows.get(name)
        if workflow is None:
            return ToolResult.fail(str(UnknownToolError(name)))

        try:
            validated = workflow.get_schema().model_validate(arguments or {})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            return ToolResult.fail(f"Invalid arguments for {name}: {problems}")

        try:
            return await workflow.run(ctx, **validated.model_dump())
        except DomainError as e:
            logger.info("Workflow '%s' failed: %s", name, e)
            return ToolResult.fail(str(e))
        except Exception as e:
            logger.exception("Workflow '%s' raised unexpectedly", name)
            return ToolResult.fail(f"{name} failed: {e}")

    # ------------------------------------------------------------------
    # Direct entry points (POST /workflows/<name>)
    # ------------------------------------------------------------------

    async def run_weather(
        self, ctx: RequestContext, location: str, unit: str = "fahrenheit",
    ) -> ToolResult:
        return await self.run("weather_workflow", ctx, {"location": location, "unit": unit})

    async def run_search(self, ctx: RequestContext, query: str) -> ToolResult:
        return await self.run("search_workflow", ctx, {"query": query})
