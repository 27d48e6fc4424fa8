"""Pydantic models for the persisted index snapshots."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with milliseconds and a Z suffix."""
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


Timestamp = Annotated[
    datetime,
    AfterValidator(_as_utc),
    PlainSerializer(format_timestamp, return_type=str),
]


class CommentRecord(BaseModel):
    """Comment entry as stored in the indexes."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    photo_id: str = Field(alias="photoId")
    user_id: str = Field(alias="userId")
    username: str
    content: str
    created_at: Timestamp = Field(alias="createdAt")


class PhotoRecord(BaseModel):
    """Photo entry as stored in the photo index."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    user_id: str = Field(alias="userId")
    username: str
    image_url: str = Field(alias="imageUrl")
    title: str
    description: str | None = None
    created_at: Timestamp = Field(alias="createdAt")
    comments: list[CommentRecord] = Field(default_factory=list)
