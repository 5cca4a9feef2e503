"""
application.feature_flags - Runtime feature flags for hosted capabilities.

One FeatureFlags instance is built by the factory and shared by the
orchestrator and the HTTP/CLI adapters. Requests never read the live
object: they take a frozen FeatureFlagSnapshot at start, so a toggle
only affects requests that begin afterwards.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, fields, replace
from typing import Mapping

from domain.exceptions import UnknownFlagError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureFlagSnapshot:
    """Immutable view of all flags at one point in time."""
    hosted_search: bool = True
    sandboxed_execution: bool = True
    document_retrieval: bool = False
    structured_output: bool = False
    remote_device_control: bool = False

    @property
    def any_hosted_tool(self) -> bool:
        return (
            self.hosted_search
            or self.sandboxed_execution
            or self.document_retrieval
            or self.remote_device_control
        )

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


FLAG_NAMES: tuple[str, ...] = tuple(f.name for f in fields(FeatureFlagSnapshot))

# Aliases that switch several flags together
FLAG_GROUPS: dict[str, tuple[str, ...]] = {
    "builtin_tools": ("hosted_search", "sandboxed_execution", "document_retrieval"),
}


def normalize_flag_name(name: str) -> str:
    """Accept both snake_case and the kebab-case names used in URLs."""
    normalized = name.strip().lower().replace("-", "_")
    if normalized not in FLAG_NAMES:
        raise UnknownFlagError(
            f"Unknown feature flag '{name}'. Known flags: {', '.join(FLAG_NAMES)}"
        )
    return normalized


def resolve_flag_names(name: str) -> tuple[str, ...]:
    """Expand a flag or group name into the flags it controls."""
    group = FLAG_GROUPS.get(name.strip().lower().replace("-", "_"))
    if group is not None:
        return group
    return (normalize_flag_name(name),)


class FeatureFlags:
    """Mutable, lock-guarded holder of the current flag values."""

    def __init__(self, initial: FeatureFlagSnapshot | None = None):
        self._lock = threading.Lock()
        self._current = initial or FeatureFlagSnapshot()

    def snapshot(self) -> FeatureFlagSnapshot:
        """Return the current values; safe to keep for a whole request."""
        with self._lock:
            return self._current

    def as_dict(self) -> dict[str, bool]:
        return self.snapshot().as_dict()

    def is_enabled(self, name: str) -> bool:
        current = self.snapshot()
        return all(getattr(current, flag) for flag in resolve_flag_names(name))

    def update(self, values: Mapping[str, bool] | None = None, **kwargs: bool) -> FeatureFlagSnapshot:
        """Set several flags at once and return the new snapshot."""
        merged = {**(values or {}), **kwargs}
        changes = {normalize_flag_name(k): bool(v) for k, v in merged.items()}
        with self._lock:
            self._current = replace(self._current, **changes)
            current = self._current
        logger.info("Feature flags updated: %s", current.as_dict())
        return current

    def enable(self, name: str) -> FeatureFlagSnapshot:
        return self.update({flag: True for flag in resolve_flag_names(name)})

    def disable(self, name: str) -> FeatureFlagSnapshot:
        return self.update({flag: False for flag in resolve_flag_names(name)})

    def toggle(self, name: str) -> FeatureFlagSnapshot:
        """Flip a flag. A group is switched on unless all its flags are on."""
        names = resolve_flag_names(name)
        with self._lock:
            value = not all(getattr(self._current, flag) for flag in names)
            self._current = replace(self._current, **{flag: value for flag in names})
            current = self._current
        logger.info("Feature flag '%s' toggled to %s", name, value)
        return current
