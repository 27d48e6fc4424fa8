"""Domain models for the photo feed."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Principal:
    """Identity of the acting user, supplied by the identity provider."""

    id: str
    display_name: str


@dataclass(frozen=True)
class Comment:
    """A comment attached to a single photo."""

    id: str
    photo_id: str
    owner_id: str
    owner_name: str
    content: str
    created_at: datetime


@dataclass(frozen=True)
class Photo:
    """An uploaded photo with its comments in chronological order."""

    id: str
    owner_id: str
    owner_name: str
    image_url: str
    title: str
    created_at: datetime
    description: str | None = None
    comments: tuple[Comment, ...] = field(default_factory=tuple)
