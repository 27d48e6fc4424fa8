"""ASGI entrypoint for the photo feed API."""

from photo_feed.api.app import create_app
from photo_feed.containers import build_container

app = create_app(build_container())
