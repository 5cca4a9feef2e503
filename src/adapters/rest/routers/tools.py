"""Capability listing."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from agent.executor import Orchestrator
from adapters.rest.dependencies import get_orchestrator
from adapters.rest.schemas import ToolsOut

router = APIRouter(tags=["tools"])


@router.get("/tools", response_model=ToolsOut)
async def list_tools(orchestrator: Orchestrator = Depends(get_orchestrator)):
    available = orchestrator.get_available_tools()
    return ToolsOut(**asdict(available), declarations=orchestrator.describe_tools())
