"""
Shared FastAPI dependencies.

- get_factory(): returns the ServiceFactory (set at startup).
- get_orchestrator(): the process-wide Orchestrator built by that factory.
"""

from __future__ import annotations

from fastapi import Depends

from agent.executor import Orchestrator
from factory import ServiceFactory

# Module-level reference set by app lifespan
_factory: ServiceFactory | None = None


def set_factory(factory: ServiceFactory | None) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


def get_orchestrator(factory: ServiceFactory = Depends(get_factory)) -> Orchestrator:
    return factory.create_orchestrator()
