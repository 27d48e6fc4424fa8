"""Azure-style blob storage client addressed by capability URLs."""

import re
from dataclasses import dataclass
from typing import Protocol

import httpx

from photo_feed.adapters.capability_urls import (
    container_list_url,
    extract_blob_name,
)
from photo_feed.domain.errors import BlobNotFoundError, BlobStorageError

_NAME_PATTERN = re.compile(r"<Name>([^<]+)</Name>")
_NEXT_MARKER_PATTERN = re.compile(r"<NextMarker>([^<]*)</NextMarker>")
_ERROR_BODY_LIMIT = 200


class BlobClient(Protocol):
    """Interface for whole-object blob storage."""

    async def put(self, url: str, content: bytes, media_type: str) -> None:
        """Create or overwrite the blob at the given URL."""

    async def get(self, url: str) -> bytes:
        """Return the blob contents, raising BlobNotFoundError when absent."""

    async def delete(self, url: str) -> None:
        """Delete a blob; deleting a missing blob succeeds."""

    async def list_blobs(self, root_url: str) -> list[str]:
        """Return the names of every blob in a container."""


@dataclass
class HttpxBlobClient(BlobClient):
    """Blob client implemented with httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(cls, timeout: float = 15) -> "HttpxBlobClient":
        """Create a blob client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), timeout=timeout)

    async def put(self, url: str, content: bytes, media_type: str) -> None:
        """Upload a block blob, replacing any existing content."""
        response = await self._send(
            "PUT",
            url,
            content=content,
            headers={"x-ms-blob-type": "BlockBlob", "Content-Type": media_type},
        )
        _raise_for_status(response, f"Failed to upload blob {_name(url)}")

    async def get(self, url: str) -> bytes:
        """Download a blob."""
        response = await self._send("GET", url)
        if response.status_code == httpx.codes.NOT_FOUND:
            raise BlobNotFoundError(
                f"Blob {_name(url)} not found", status_code=response.status_code
            )
        _raise_for_status(response, f"Failed to get blob {_name(url)}")
        return response.content

    async def delete(self, url: str) -> None:
        """Delete a blob."""
        response = await self._send("DELETE", url)
        if response.status_code == httpx.codes.NOT_FOUND:
            return
        _raise_for_status(response, f"Failed to delete blob {_name(url)}")

    async def list_blobs(self, root_url: str) -> list[str]:
        """List blob names, following continuation markers."""
        names: list[str] = []
        marker: str | None = None
        while True:
            response = await self._send("GET", container_list_url(root_url, marker))
            _raise_for_status(response, "Failed to list blobs")
            body = response.text
            names.extend(_NAME_PATTERN.findall(body))
            next_marker = _NEXT_MARKER_PATTERN.search(body)
            if next_marker is None or not next_marker.group(1):
                return names
            marker = next_marker.group(1)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(self, method: str, url: str, **kwargs: object) -> httpx.Response:
        try:
            return await self.http_client.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except httpx.TransportError as exc:
            raise BlobStorageError(
                f"{method} {_name(url)} failed: {exc.__class__.__name__}",
                status_code=None,
            ) from exc


def _raise_for_status(response: httpx.Response, message: str) -> None:
    """Raise BlobStorageError for any non-2xx response."""
    if response.is_success:
        return
    raise BlobStorageError(
        message,
        status_code=response.status_code,
        body=response.text[:_ERROR_BODY_LIMIT],
    )


def _name(url: str) -> str:
    try:
        return extract_blob_name(url)
    except ValueError:
        return "<container>"
