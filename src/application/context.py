"""
application.context - Request-scoped context.

Every tool, workflow and orchestrator step receives its context explicitly.
Two concurrent requests get two different RequestContext instances, each
with its own feature-flag snapshot taken at request start.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from application.feature_flags import FeatureFlagSnapshot


@dataclass
class RequestContext:
    """Per-request context passed through all layers.

    Attributes:
        message:     The raw user message for this request.
        flags:       Feature flags as they were when the request started.
                     Later toggles never leak into an in-flight request.
        request_id:  Unique per request, for tracing/logging.
        scratch:     Request-scoped scratchpad for inter-step data sharing.
    """
    message: str
    flags: FeatureFlagSnapshot = field(default_factory=FeatureFlagSnapshot)
    request_id: str = field(default_factory=lambda: uuid4().hex)
    scratch: dict[str, Any] = field(default_factory=dict)
