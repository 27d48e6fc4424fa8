"""Connectivity checks for the photo and comment containers."""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from photo_feed.adapters.blob_client import BlobClient
from photo_feed.adapters.capability_urls import resolve
from photo_feed.domain.errors import BlobStorageError
from photo_feed.services.snapshot_codec import JSON_MEDIA_TYPE

PROBE_BLOB_NAME = "test-connection.json"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageCheckStep:
    """Outcome of one diagnostic step."""

    name: str
    ok: bool
    detail: str


@dataclass(frozen=True)
class StorageReport:
    """Outcome of a full storage check."""

    steps: list[StorageCheckStep] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return whether every step passed."""
        return all(step.ok for step in self.steps)


@dataclass
class StorageCheckService:
    """Checks that both containers are reachable and writable."""

    blob_client: BlobClient
    photo_container_url: str
    comment_container_url: str

    async def run(self) -> StorageReport:
        """Run the checks, stopping at the first failing step."""
        steps: list[StorageCheckStep] = []
        for name, check in (
            ("list_photo_container", self._list_photo_container),
            ("list_comment_container", self._list_comment_container),
            ("write_read_delete", self._probe_write),
        ):
            try:
                detail = await check()
            except BlobStorageError as exc:
                _logger.warning("Storage check %s failed: %s", name, exc)
                steps.append(StorageCheckStep(name=name, ok=False, detail=str(exc)))
                break
            steps.append(StorageCheckStep(name=name, ok=True, detail=detail))
        return StorageReport(steps=steps)

    async def _list_photo_container(self) -> str:
        names = await self.blob_client.list_blobs(self.photo_container_url)
        return f"{len(names)} blobs found"

    async def _list_comment_container(self) -> str:
        names = await self.blob_client.list_blobs(self.comment_container_url)
        return f"{len(names)} blobs found"

    async def _probe_write(self) -> str:
        url = resolve(self.photo_container_url, PROBE_BLOB_NAME)
        created_at = datetime.now(tz=UTC).isoformat()
        payload = json.dumps({"test": True, "timestamp": created_at}).encode()
        await self.blob_client.put(url, payload, JSON_MEDIA_TYPE)
        echoed = json.loads(await self.blob_client.get(url))
        await self.blob_client.delete(url)
        if echoed.get("timestamp") != created_at:
            raise BlobStorageError("Probe blob content mismatch", status_code=None)
        return f"probe written at {created_at}"
