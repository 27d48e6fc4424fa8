"""Tests for container wiring."""

import asyncio

from photo_feed.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.photo_store.photo_container_url == settings.photo_storage_url
    assert container.storage_check_service is not None
    asyncio.run(container.close_resources())
