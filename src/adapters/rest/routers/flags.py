"""Feature flag management.

Flag names in URLs are kebab-case (`/api/toggle-hosted-search`);
`builtin-tools` switches all hosted tool flags together.
"""

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status

from agent.executor import Orchestrator
from adapters.rest.dependencies import get_orchestrator
from adapters.rest.schemas import FlagChangeOut, FlagsOut
from domain.exceptions import UnknownFlagError

router = APIRouter(prefix="/api", tags=["flags"])


def _change(action: Callable[[str], dict[str, bool]], flag: str, verb: str) -> FlagChangeOut:
    try:
        flags = action(flag)
    except UnknownFlagError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    label = flag.replace("-", " ").replace("_", " ")
    return FlagChangeOut(message=f"{label.capitalize()} {verb}", flags=flags)


@router.get("/flags", response_model=FlagsOut)
async def get_flags(orchestrator: Orchestrator = Depends(get_orchestrator)):
    return FlagsOut(flags=orchestrator.flags.as_dict())


@router.post("/enable-{flag}", response_model=FlagChangeOut)
async def enable_flag(flag: str, orchestrator: Orchestrator = Depends(get_orchestrator)):
    return _change(orchestrator.enable_flag, flag, "enabled")


@router.post("/disable-{flag}", response_model=FlagChangeOut)
async def disable_flag(flag: str, orchestrator: Orchestrator = Depends(get_orchestrator)):
    return _change(orchestrator.disable_flag, flag, "disabled")


@router.post("/toggle-{flag}", response_model=FlagChangeOut)
async def toggle_flag(flag: str, orchestrator: Orchestrator = Depends(get_orchestrator)):
    return _change(orchestrator.toggle_flag, flag, "toggled")
