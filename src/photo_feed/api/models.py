"""Pydantic models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from photo_feed.domain.models import Comment, Photo
from photo_feed.domain.snapshots import Timestamp


class CreatePhotoRequest(BaseModel):
    """Body of a photo upload."""

    title: str
    description: str | None = None
    image: str = Field(description="Image as `<media type>;base64,<data>`")


class UpdatePhotoRequest(BaseModel):
    """Body of a photo edit; omitted fields are left unchanged."""

    title: str | None = None
    description: str | None = None


class CreateCommentRequest(BaseModel):
    """Body of a new comment."""

    model_config = ConfigDict(populate_by_name=True)

    photo_id: str = Field(alias="photoId")
    content: str


class CommentResponse(BaseModel):
    """Comment as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    photo_id: str = Field(alias="photoId")
    user_id: str = Field(alias="userId")
    username: str
    content: str
    created_at: Timestamp = Field(alias="createdAt")

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        """Build a response from a domain comment."""
        return cls(
            id=comment.id,
            photo_id=comment.photo_id,
            user_id=comment.owner_id,
            username=comment.owner_name,
            content=comment.content,
            created_at=comment.created_at,
        )


class PhotoResponse(BaseModel):
    """Photo as returned to clients, with the live image URL."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    username: str
    image_url: str = Field(alias="imageUrl")
    title: str
    description: str | None = None
    created_at: Timestamp = Field(alias="createdAt")
    comments: list[CommentResponse]

    @classmethod
    def from_photo(cls, photo: Photo) -> "PhotoResponse":
        """Build a response from a domain photo."""
        return cls(
            id=photo.id,
            user_id=photo.owner_id,
            username=photo.owner_name,
            image_url=photo.image_url,
            title=photo.title,
            description=photo.description,
            created_at=photo.created_at,
            comments=[CommentResponse.from_comment(c) for c in photo.comments],
        )


class PhotoPage(BaseModel):
    """One page of the photo feed."""

    model_config = ConfigDict(populate_by_name=True)

    photos: list[PhotoResponse]
    has_more: bool = Field(alias="hasMore")
