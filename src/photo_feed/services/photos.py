"""Photo collection cached in memory and persisted as blob snapshots."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from photo_feed.adapters.blob_client import BlobClient
from photo_feed.adapters.capability_urls import (
    extract_blob_name,
    is_blob_url,
    resolve,
)
from photo_feed.domain.errors import (
    BlobNotFoundError,
    BlobStorageError,
    InputValidationError,
    OwnershipError,
    RecordNotFoundError,
    SnapshotDecodeError,
    SyncError,
)
from photo_feed.domain.models import Comment, Photo, Principal
from photo_feed.services.snapshot_codec import (
    JSON_MEDIA_TYPE,
    decode_inline_image,
    decode_photo_index,
    encode_comment_index,
    encode_photo_index,
    media_type_to_extension,
)

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class PhotoStore:
    """In-process photo collection backed by two remote index snapshots.

    The cache is loaded from the photo index on first use and trusted for the
    rest of the process lifetime. Every mutation updates the cache first and
    then rewrites both indexes. Photo creation is the one case where the
    rewrite runs in the background; its failures are only logged.
    """

    blob_client: BlobClient
    photo_container_url: str
    comment_container_url: str
    photo_index_name: str = "photos-index.json"
    comment_index_name: str = "comments-index.json"
    photo_blob_prefix: str = "photo-"
    comment_id_floor: int = 100
    clock: Callable[[], datetime] = _utcnow

    _photos: list[Photo] = field(default_factory=list, init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)
    _next_photo_id: int = field(default=1, init=False, repr=False)
    _next_comment_id: int = field(default=0, init=False, repr=False)
    _init_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )
    _write_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )
    _background_syncs: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    async def list_photos(self, offset: int = 0, limit: int = 10) -> list[Photo]:
        """Return a page of photos, newest first."""
        if offset < 0 or limit < 0:
            raise InputValidationError("Offset and limit must not be negative")
        await self.ensure_initialized()
        ordered = sorted(self._photos, key=lambda photo: photo.created_at, reverse=True)
        return ordered[offset : offset + limit]

    async def get_photo(self, photo_id: str) -> Photo | None:
        """Return a photo by id, if present."""
        await self.ensure_initialized()
        return self._find_photo(photo_id)

    async def create_photo(
        self,
        principal: Principal,
        title: str,
        image_payload: str,
        description: str | None = None,
    ) -> Photo:
        """Upload the image, add the photo, and sync the indexes in the background."""
        if not title or not title.strip():
            raise InputValidationError("Title is required")
        if not image_payload:
            raise InputValidationError("Image is required")
        content, media_type = decode_inline_image(image_payload)
        await self.ensure_initialized()

        photo_id = str(self._next_photo_id)
        self._next_photo_id += 1
        blob_name = (
            f"{self.photo_blob_prefix}{photo_id}.{media_type_to_extension(media_type)}"
        )
        image_url = resolve(self.photo_container_url, blob_name)
        await self.blob_client.put(image_url, content, media_type)

        photo = Photo(
            id=photo_id,
            owner_id=principal.id,
            owner_name=principal.display_name,
            image_url=image_url,
            title=title.strip(),
            description=description,
            created_at=self.clock(),
        )
        self._photos.insert(0, photo)
        _logger.info("Photo created: id=%s blob=%s", photo_id, blob_name)

        task = asyncio.create_task(self._background_sync(photo_id))
        self._background_syncs.add(task)
        task.add_done_callback(self._background_syncs.discard)
        return photo

    async def update_photo(
        self,
        photo_id: str,
        principal: Principal,
        title: str | None = None,
        description: str | None = None,
    ) -> Photo:
        """Update the title and/or description of a photo owned by the caller."""
        if title is not None and not title.strip():
            raise InputValidationError("Title must not be empty")
        await self.ensure_initialized()
        async with self._write_lock:
            index = self._owned_photo_index(photo_id, principal)
            photo = self._photos[index]
            if title is not None:
                photo = replace(photo, title=title.strip())
            if description is not None:
                photo = replace(photo, description=description)
            self._photos[index] = photo
            await self._sync()
        return photo

    async def delete_photo(self, photo_id: str, principal: Principal) -> None:
        """Delete a photo owned by the caller, together with its comments."""
        await self.ensure_initialized()
        async with self._write_lock:
            index = self._owned_photo_index(photo_id, principal)
            photo = self._photos.pop(index)
            await self._sync()
            await self._delete_image(photo)

    async def add_comment(
        self, photo_id: str, principal: Principal, content: str
    ) -> Comment:
        """Append a comment to a photo."""
        text = (content or "").strip()
        if not text:
            raise InputValidationError("Comment content is required")
        await self.ensure_initialized()
        async with self._write_lock:
            photo = self._find_photo(photo_id)
            if photo is None:
                raise RecordNotFoundError("Photo", photo_id)
            comment = Comment(
                id=str(self._next_comment_id),
                photo_id=photo.id,
                owner_id=principal.id,
                owner_name=principal.display_name,
                content=text,
                created_at=self.clock(),
            )
            self._next_comment_id += 1
            self._replace_photo(replace(photo, comments=(*photo.comments, comment)))
            await self._sync()
        return comment

    async def delete_comment(self, comment_id: str, principal: Principal) -> None:
        """Delete the first comment with the given id written by the caller."""
        await self.ensure_initialized()
        async with self._write_lock:
            for index, photo in enumerate(self._photos):
                remaining = _without_comment(photo.comments, comment_id, principal.id)
                if remaining is None:
                    continue
                self._photos[index] = replace(photo, comments=remaining)
                await self._sync()
                return
        if any(
            comment.id == comment_id
            for photo in self._photos
            for comment in photo.comments
        ):
            raise OwnershipError("Comment", comment_id)
        raise RecordNotFoundError("Comment", comment_id)

    async def ensure_initialized(self) -> None:
        """Load the photo index on first use."""
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            photos = await self._load_index()
            self._photos = [self._refresh_image_url(photo) for photo in photos]
            self._next_photo_id = _max_numeric_id(photo.id for photo in photos) + 1
            comment_ids = [comment.id for photo in photos for comment in photo.comments]
            self._next_comment_id = (
                _max_numeric_id(comment_ids) + 1
                if comment_ids
                else self.comment_id_floor
            )
            self._initialized = True
            _logger.info(
                "Photo cache initialized: photos=%s next_photo_id=%s "
                "next_comment_id=%s",
                len(self._photos),
                self._next_photo_id,
                self._next_comment_id,
            )

    async def wait_for_background_syncs(self) -> None:
        """Wait until pending background index syncs have finished."""
        while self._background_syncs:
            await asyncio.gather(*self._background_syncs, return_exceptions=True)

    async def _load_index(self) -> list[Photo]:
        url = resolve(self.photo_container_url, self.photo_index_name)
        try:
            return decode_photo_index(await self.blob_client.get(url))
        except BlobNotFoundError:
            _logger.info(
                "Photo index %s not found, starting empty", self.photo_index_name
            )
        except (BlobStorageError, SnapshotDecodeError):
            _logger.exception(
                "Failed to load photo index %s, starting empty; the next write "
                "will replace the remote index",
                self.photo_index_name,
            )
        return []

    async def _sync(self) -> None:
        """Rewrite the photo index and the flat comment index."""
        photos = list(self._photos)
        comments = [
            replace(comment, photo_id=photo.id)
            for photo in photos
            for comment in photo.comments
        ]
        try:
            await self.blob_client.put(
                resolve(self.photo_container_url, self.photo_index_name),
                encode_photo_index(photos),
                JSON_MEDIA_TYPE,
            )
            await self.blob_client.put(
                resolve(self.comment_container_url, self.comment_index_name),
                encode_comment_index(comments),
                JSON_MEDIA_TYPE,
            )
        except BlobStorageError as exc:
            raise SyncError(f"Failed to sync indexes: {exc}") from exc

    async def _background_sync(self, photo_id: str) -> None:
        try:
            async with self._write_lock:
                await self._sync()
        except Exception:
            _logger.exception(
                "Background sync failed after creating photo %s", photo_id
            )

    async def _delete_image(self, photo: Photo) -> None:
        if not is_blob_url(photo.image_url, self.photo_container_url):
            return
        try:
            await self.blob_client.delete(photo.image_url)
        except BlobStorageError:
            _logger.warning(
                "Failed to delete image blob for photo %s", photo.id, exc_info=True
            )

    def _refresh_image_url(self, photo: Photo) -> Photo:
        if not is_blob_url(photo.image_url, self.photo_container_url):
            return photo
        try:
            blob_name = extract_blob_name(photo.image_url)
        except ValueError:
            _logger.warning("Photo %s has no blob name in its image URL", photo.id)
            return photo
        return replace(
            photo, image_url=resolve(self.photo_container_url, blob_name)
        )

    def _find_photo(self, photo_id: str) -> Photo | None:
        for photo in self._photos:
            if photo.id == photo_id:
                return photo
        return None

    def _owned_photo_index(self, photo_id: str, principal: Principal) -> int:
        for index, photo in enumerate(self._photos):
            if photo.id != photo_id:
                continue
            if photo.owner_id != principal.id:
                raise OwnershipError("Photo", photo_id)
            return index
        raise RecordNotFoundError("Photo", photo_id)

    def _replace_photo(self, updated: Photo) -> None:
        for index, photo in enumerate(self._photos):
            if photo.id == updated.id:
                self._photos[index] = updated
                return


def _without_comment(
    comments: tuple[Comment, ...], comment_id: str, owner_id: str
) -> tuple[Comment, ...] | None:
    """Return comments minus the matching one, or None when nothing matches."""
    for index, comment in enumerate(comments):
        if comment.id == comment_id and comment.owner_id == owner_id:
            return comments[:index] + comments[index + 1 :]
    return None


def _max_numeric_id(ids: Iterable[str]) -> int:
    values = [int(value) if value.isdecimal() else 0 for value in ids]
    return max(values, default=0)
