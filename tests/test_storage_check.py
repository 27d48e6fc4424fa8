"""Tests for the storage connectivity check."""

import asyncio

from photo_feed.services.storage_check import PROBE_BLOB_NAME, StorageCheckService
from tests.conftest import COMMENT_ROOT, PHOTO_ROOT, InMemoryBlobClient


def _service(blob_client: InMemoryBlobClient) -> StorageCheckService:
    return StorageCheckService(
        blob_client=blob_client,
        photo_container_url=PHOTO_ROOT,
        comment_container_url=COMMENT_ROOT,
    )


def test_storage_check_passes_and_cleans_up(blob_client: InMemoryBlobClient) -> None:
    blob_client.blobs[f"{PHOTO_ROOT.split('?')[0]}/photo-1.png"] = b"png"

    report = asyncio.run(_service(blob_client).run())

    assert report.ok
    assert [step.name for step in report.steps] == [
        "list_photo_container",
        "list_comment_container",
        "write_read_delete",
    ]
    assert report.steps[0].detail == "1 blobs found"
    assert blob_client.blob(PHOTO_ROOT, PROBE_BLOB_NAME) is None


def test_storage_check_stops_at_first_failure(
    blob_client: InMemoryBlobClient,
) -> None:
    blob_client.failing_puts.add(PROBE_BLOB_NAME)

    report = asyncio.run(_service(blob_client).run())

    assert not report.ok
    assert report.steps[-1].name == "write_read_delete"
    assert not report.steps[-1].ok
    assert "status=500" in report.steps[-1].detail
