"""Shared test fixtures."""

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from photo_feed.adapters.blob_client import BlobClient
from photo_feed.adapters.capability_urls import extract_blob_name, strip_token
from photo_feed.config import Settings
from photo_feed.containers import AppContainer
from photo_feed.domain.errors import BlobNotFoundError, BlobStorageError
from photo_feed.domain.models import Principal
from photo_feed.services.photos import PhotoStore
from photo_feed.services.storage_check import StorageCheckService

PHOTO_ROOT = "https://acct.blob.core.windows.net/photo?sv=2024-01-01&sig=first"
COMMENT_ROOT = "https://acct.blob.core.windows.net/comment?sv=2024-01-01&sig=first"
PNG_PAYLOAD = "image/png;base64,iVBORw0KGgo="

ALICE = Principal(id="1", display_name="alice")
BOB = Principal(id="2", display_name="bob")


@dataclass
class InMemoryBlobClient(BlobClient):
    """In-memory blob store keyed by URL without the access token."""

    blobs: dict[str, bytes] = field(default_factory=dict)
    media_types: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    failing_puts: set[str] = field(default_factory=set)
    failing_deletes: set[str] = field(default_factory=set)
    get_error_status: int | None = None
    put_gate: asyncio.Event | None = None

    async def put(self, url: str, content: bytes, media_type: str) -> None:
        self.calls.append(("PUT", url))
        name = extract_blob_name(url)
        if self.put_gate is not None and name.endswith("-index.json"):
            await self.put_gate.wait()
        if name in self.failing_puts:
            raise BlobStorageError(f"Failed to upload blob {name}", status_code=500)
        self.blobs[strip_token(url)] = content
        self.media_types[strip_token(url)] = media_type

    async def get(self, url: str) -> bytes:
        self.calls.append(("GET", url))
        if self.get_error_status is not None:
            raise BlobStorageError("Failed to get blob", self.get_error_status)
        key = strip_token(url)
        if key not in self.blobs:
            raise BlobNotFoundError("Blob not found", status_code=404)
        return self.blobs[key]

    async def delete(self, url: str) -> None:
        self.calls.append(("DELETE", url))
        name = extract_blob_name(url)
        if name in self.failing_deletes:
            raise BlobStorageError(f"Failed to delete blob {name}", status_code=500)
        self.blobs.pop(strip_token(url), None)

    async def list_blobs(self, root_url: str) -> list[str]:
        prefix = strip_token(root_url).rstrip("/") + "/"
        return [key[len(prefix) :] for key in self.blobs if key.startswith(prefix)]

    def blob(self, root_url: str, name: str) -> bytes | None:
        """Return stored content for a blob name in a container."""
        return self.blobs.get(f"{strip_token(root_url)}/{name}")


def make_store(
    blob_client: InMemoryBlobClient,
    photo_root: str = PHOTO_ROOT,
    comment_root: str = COMMENT_ROOT,
) -> PhotoStore:
    return PhotoStore(
        blob_client=blob_client,
        photo_container_url=photo_root,
        comment_container_url=comment_root,
    )


@pytest.fixture(autouse=True)
def propagate_app_logs() -> Iterator[None]:
    logger = logging.getLogger("photo_feed")
    logger.propagate = True
    yield
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        photo_storage_url=PHOTO_ROOT,
        comment_storage_url=COMMENT_ROOT,
        admin_token="admin-token",
    )


@pytest.fixture
def blob_client() -> InMemoryBlobClient:
    return InMemoryBlobClient()


@pytest.fixture
def container(settings: Settings, blob_client: InMemoryBlobClient) -> AppContainer:
    photo_store = make_store(blob_client)
    storage_check_service = StorageCheckService(
        blob_client=blob_client,
        photo_container_url=settings.photo_storage_url,
        comment_container_url=settings.comment_storage_url,
    )

    async def close_resources() -> None:
        await photo_store.wait_for_background_syncs()

    return AppContainer(
        settings=settings,
        photo_store=photo_store,
        storage_check_service=storage_check_service,
        close_resources=close_resources,
    )
