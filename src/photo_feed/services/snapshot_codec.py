"""Encoding of index snapshots and inline image payloads."""

import base64
import binascii

from pydantic import TypeAdapter, ValidationError

from photo_feed.adapters.capability_urls import strip_token
from photo_feed.domain.errors import InputValidationError, SnapshotDecodeError
from photo_feed.domain.models import Comment, Photo
from photo_feed.domain.snapshots import CommentRecord, PhotoRecord

DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"
JSON_MEDIA_TYPE = "application/json"

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

_PHOTO_INDEX = TypeAdapter(list[PhotoRecord])
_COMMENT_INDEX = TypeAdapter(list[CommentRecord])


def encode_photo_index(photos: list[Photo]) -> bytes:
    """Serialize photos, with nested comments, into the photo index document."""
    return _PHOTO_INDEX.dump_json(
        [_photo_record(photo) for photo in photos],
        by_alias=True,
        exclude_none=True,
        indent=2,
    )


def decode_photo_index(raw: bytes) -> list[Photo]:
    """Parse the photo index document."""
    try:
        records = _PHOTO_INDEX.validate_json(raw)
    except ValidationError as exc:
        raise SnapshotDecodeError(f"Invalid photo index: {exc}") from exc
    return [_photo_from_record(record) for record in records]


def encode_comment_index(comments: list[Comment]) -> bytes:
    """Serialize the flat comment index document."""
    return _COMMENT_INDEX.dump_json(
        [_comment_record(comment) for comment in comments],
        by_alias=True,
        indent=2,
    )


def decode_comment_index(raw: bytes) -> list[Comment]:
    """Parse the flat comment index document."""
    try:
        records = _COMMENT_INDEX.validate_json(raw)
    except ValidationError as exc:
        raise SnapshotDecodeError(f"Invalid comment index: {exc}") from exc
    return [_comment_from_record(record) for record in records]


def decode_inline_image(payload: str) -> tuple[bytes, str]:
    """Decode a `<media type>;base64,<body>` payload into bytes and media type.

    A leading ``data:`` scheme is accepted. When the prefix does not name a
    media type, or there is no prefix at all, the image is assumed to be JPEG.
    """
    prefix, separator, body = payload.strip().partition(",")
    if not separator:
        prefix, body = "", prefix
    media_type = _media_type_from_prefix(prefix)
    body = "".join(body.split())
    body += "=" * (-len(body) % 4)
    try:
        content = base64.b64decode(body, validate=True)
    except binascii.Error as exc:
        raise InputValidationError("Image payload is not valid base64") from exc
    if not content:
        raise InputValidationError("Image payload is empty")
    return content, media_type


def media_type_to_extension(media_type: str) -> str:
    """Map an image media type to a file extension, defaulting to jpg."""
    return _EXTENSIONS.get(media_type.lower(), "jpg")


def _media_type_from_prefix(prefix: str) -> str:
    candidate = prefix.removeprefix("data:").split(";", 1)[0].strip().lower()
    if "/" not in candidate:
        return DEFAULT_IMAGE_MEDIA_TYPE
    return candidate


def _photo_record(photo: Photo) -> PhotoRecord:
    return PhotoRecord(
        id=photo.id,
        user_id=photo.owner_id,
        username=photo.owner_name,
        image_url=strip_token(photo.image_url),
        title=photo.title,
        description=photo.description,
        created_at=photo.created_at,
        comments=[_comment_record(comment) for comment in photo.comments],
    )


def _comment_record(comment: Comment) -> CommentRecord:
    return CommentRecord(
        id=comment.id,
        photo_id=comment.photo_id,
        user_id=comment.owner_id,
        username=comment.owner_name,
        content=comment.content,
        created_at=comment.created_at,
    )


def _photo_from_record(record: PhotoRecord) -> Photo:
    return Photo(
        id=record.id,
        owner_id=record.user_id,
        owner_name=record.username,
        image_url=record.image_url,
        title=record.title,
        description=record.description,
        created_at=record.created_at,
        comments=tuple(_comment_from_record(comment) for comment in record.comments),
    )


def _comment_from_record(record: CommentRecord) -> Comment:
    return Comment(
        id=record.id,
        photo_id=record.photo_id,
        owner_id=record.user_id,
        owner_name=record.username,
        content=record.content,
        created_at=record.created_at,
    )
