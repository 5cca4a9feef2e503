"""Direct workflow endpoints (bypass classification)."""

from fastapi import APIRouter, Depends, HTTPException, status

from agent.executor import Orchestrator
from agent.tools.base import ToolResult
from adapters.rest.dependencies import get_orchestrator
from adapters.rest.schemas import SearchWorkflowBody, WeatherWorkflowBody, WorkflowOut

router = APIRouter(prefix="/workflows", tags=["workflows"])


def _to_out(result: ToolResult) -> WorkflowOut:
    if result.error and result.error.startswith("Unknown tool"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    return WorkflowOut(result=result.to_dict())


@router.post("/weather", response_model=WorkflowOut)
async def weather_workflow(
    body: WeatherWorkflowBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.run_weather_workflow(body.location, body.unit)
    return _to_out(result)


@router.post("/search", response_model=WorkflowOut)
async def search_workflow(
    body: SearchWorkflowBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.run_search_workflow(body.query)
    return _to_out(result)
