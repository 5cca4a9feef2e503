"""
infrastructure.llm.remote_resources - Lazily provisioned, memoized remote handles.

The code interpreter needs an execution container and hosted file search
needs a vector store. Both are created on first use and then reused for the
lifetime of the adapter. Creation is a check-then-act sequence, so it runs
under an asyncio.Lock: concurrent first callers wait for the one in-flight
provisioning call instead of creating duplicates.

The collaborator API does not promise idempotent create-by-name, hence the
client-side lock.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence

from domain.exceptions import ProvisioningError

logger = logging.getLogger(__name__)

Provisioner = Callable[[], Awaitable[str]]


class LazyResource:
    """Single-initialization cell for one remote resource id."""

    def __init__(self, kind: str, provision: Provisioner):
        self._kind = kind
        self._provision = provision
        self._handle: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def handle(self) -> Optional[str]:
        """The cached id, or None if not provisioned yet."""
        return self._handle

    async def get(self) -> str:
        """Return the handle, provisioning it on the first call only.

        A failed provisioning attempt leaves the cell empty so the next
        request can retry.
        """
        if self._handle is not None:
            return self._handle
        async with self._lock:
            if self._handle is None:
                try:
                    handle = await self._provision()
                except ProvisioningError:
                    raise
                except Exception as e:
                    raise ProvisioningError(
                        f"Failed to provision {self._kind}: {e}"
                    ) from e
                self._handle = handle
                logger.info("Provisioned %s: %s", self._kind, handle)
        return self._handle


def container_provisioner(client: Any, name: str) -> Provisioner:
    """Create one code-interpreter container on the upstream service."""

    async def _create() -> str:
        container = await client.containers.create(name=name)
        return container.id

    return _create


def vector_store_provisioner(
    client: Any,
    name: str,
    document_paths: Sequence[Path] = (),
) -> Provisioner:
    """Create one vector store and upload the configured documents into it.

    The store id is kept once created, so a retry after a failed upload
    reuses the same store instead of creating another one.
    """
    store_id: Optional[str] = None

    async def _create() -> str:
        nonlocal store_id
        if store_id is None:
            store = await client.vector_stores.create(name=name)
            store_id = store.id
        paths = [Path(p) for p in document_paths if Path(p).is_file()]
        if paths:
            with ExitStack() as stack:
                handles = [stack.enter_context(p.open("rb")) for p in paths]
                await client.vector_stores.file_batches.upload_and_poll(
                    vector_store_id=store_id, files=handles,
                )
            logger.info("Uploaded %d document(s) to vector store %s", len(paths), store_id)
        return store_id

    return _create
