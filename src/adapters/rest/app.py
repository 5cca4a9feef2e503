"""
FastAPI application - REST adapter for the tool-routing agent.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure src/ is on sys.path when invoked via uvicorn directly
_src_dir = Path(__file__).resolve().parent.parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from infrastructure.config import Settings
from factory import ServiceFactory
from adapters.rest.dependencies import set_factory
from adapters.rest.routers import agent, flags, tools, workflows

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the ServiceFactory and Orchestrator on startup."""
    project_root = _src_dir.parent
    config = Settings.from_env(project_root=project_root)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    factory = ServiceFactory(config)
    factory.create_orchestrator()
    set_factory(factory)
    yield
    set_factory(None)


app = FastAPI(
    title="Tool-Routing Agent",
    version=VERSION,
    description="Routes free-text requests to local tools, workflows and hosted model tools.",
    lifespan=lifespan,
)

# CORS - permissive for development; tighten allowed_origins in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(agent.router)
app.include_router(tools.router)
app.include_router(flags.router)
app.include_router(workflows.router)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "version": VERSION}
