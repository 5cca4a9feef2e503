"""Tests for lazily provisioned remote resources."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from domain.exceptions import ProvisioningError, UpstreamServiceError
from infrastructure.llm.remote_resources import (
    LazyResource,
    container_provisioner,
    vector_store_provisioner,
)


class TestLazyResource:

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_provision_once(self):
        calls = 0

        async def provision():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return "cntr_123"

        resource = LazyResource("container", provision)
        handles = await asyncio.gather(*(resource.get() for _ in range(10)))

        assert calls == 1
        assert set(handles) == {"cntr_123"}
        assert resource.handle == "cntr_123"

    @pytest.mark.asyncio
    async def test_later_calls_reuse_handle(self):
        provision = AsyncMock(return_value="vs_1")
        resource = LazyResource("vector_store", provision)
        await resource.get()
        await resource.get()
        provision.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_leaves_cell_empty_for_retry(self):
        provision = AsyncMock(side_effect=[RuntimeError("quota"), "cntr_2"])
        resource = LazyResource("container", provision)

        with pytest.raises(ProvisioningError, match="quota"):
            await resource.get()
        assert resource.handle is None

        assert await resource.get() == "cntr_2"
        assert provision.await_count == 2

    @pytest.mark.asyncio
    async def test_provisioning_error_is_an_upstream_error(self):
        resource = LazyResource("container", AsyncMock(side_effect=RuntimeError("x")))
        with pytest.raises(UpstreamServiceError):
            await resource.get()


@pytest.mark.asyncio
async def test_container_provisioner_creates_by_name():
    client = SimpleNamespace(
        containers=SimpleNamespace(create=AsyncMock(return_value=SimpleNamespace(id="cntr_9"))),
    )
    handle = await container_provisioner(client, "agent-box")()
    assert handle == "cntr_9"
    client.containers.create.assert_awaited_once_with(name="agent-box")


@pytest.mark.asyncio
async def test_vector_store_provisioner_uploads_existing_documents(tmp_path):
    doc = tmp_path / "guide.md"
    doc.write_text("hello", encoding="utf-8")
    client = SimpleNamespace(
        vector_stores=SimpleNamespace(
            create=AsyncMock(return_value=SimpleNamespace(id="vs_7")),
            file_batches=SimpleNamespace(upload_and_poll=AsyncMock()),
        ),
    )

    handle = await vector_store_provisioner(client, "docs", [doc, tmp_path / "missing.md"])()

    assert handle == "vs_7"
    client.vector_stores.create.assert_awaited_once_with(name="docs")
    kwargs = client.vector_stores.file_batches.upload_and_poll.await_args.kwargs
    assert kwargs["vector_store_id"] == "vs_7"
    assert len(kwargs["files"]) == 1


@pytest.mark.asyncio
async def test_failed_upload_retry_reuses_the_created_store(tmp_path):
    doc = tmp_path / "guide.md"
    doc.write_text("hello", encoding="utf-8")
    client = SimpleNamespace(
        vector_stores=SimpleNamespace(
            create=AsyncMock(return_value=SimpleNamespace(id="vs_5")),
            file_batches=SimpleNamespace(
                upload_and_poll=AsyncMock(side_effect=[RuntimeError("upload"), None]),
            ),
        ),
    )
    resource = LazyResource("vector_store", vector_store_provisioner(client, "docs", [doc]))

    with pytest.raises(ProvisioningError, match="upload"):
        await resource.get()
    assert await resource.get() == "vs_5"

    client.vector_stores.create.assert_awaited_once_with(name="docs")
    assert client.vector_stores.file_batches.upload_and_poll.await_count == 2
    first_batch = client.vector_stores.file_batches.upload_and_poll.await_args_list[0].kwargs["files"]
    assert all(fh.closed for fh in first_batch)


@pytest.mark.asyncio
async def test_vector_store_without_documents_skips_upload():
    client = SimpleNamespace(
        vector_stores=SimpleNamespace(
            create=AsyncMock(return_value=SimpleNamespace(id="vs_8")),
            file_batches=SimpleNamespace(upload_and_poll=AsyncMock()),
        ),
    )
    assert await vector_store_provisioner(client, "docs")() == "vs_8"
    client.vector_stores.file_batches.upload_and_poll.assert_not_awaited()
