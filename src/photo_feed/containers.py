"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_feed.adapters.blob_client import HttpxBlobClient
from photo_feed.config import Settings
from photo_feed.services.photos import PhotoStore
from photo_feed.services.storage_check import StorageCheckService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_store: PhotoStore
    storage_check_service: StorageCheckService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    blob_client = HttpxBlobClient.create(
        timeout=resolved_settings.storage_timeout_seconds
    )
    photo_store = PhotoStore(
        blob_client=blob_client,
        photo_container_url=resolved_settings.photo_storage_url,
        comment_container_url=resolved_settings.comment_storage_url,
        photo_index_name=resolved_settings.photo_index_name,
        comment_index_name=resolved_settings.comment_index_name,
        photo_blob_prefix=resolved_settings.photo_blob_prefix,
        comment_id_floor=resolved_settings.comment_id_floor,
    )
    storage_check_service = StorageCheckService(
        blob_client=blob_client,
        photo_container_url=resolved_settings.photo_storage_url,
        comment_container_url=resolved_settings.comment_storage_url,
    )

    async def close_resources() -> None:
        await photo_store.wait_for_background_syncs()
        await blob_client.close()

    return AppContainer(
        settings=resolved_settings,
        photo_store=photo_store,
        storage_check_service=storage_check_service,
        close_resources=close_resources,
    )
