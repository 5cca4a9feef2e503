"""Agent endpoint: one message in, one answer out."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from agent.executor import Orchestrator
from adapters.rest.dependencies import get_orchestrator
from adapters.rest.schemas import AgentBody, AgentOut
from domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["agent"])


@router.post("/agent", response_model=AgentOut)
async def run_agent(
    body: AgentBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    try:
        result = await orchestrator.run_agent(body.message, body.to_options())
    except UpstreamServiceError as exc:
        logger.error("Agent request failed upstream: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        )
    return AgentOut(**result.to_dict())
