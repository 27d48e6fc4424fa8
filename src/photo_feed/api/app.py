"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from photo_feed.api.admin import router as admin_router
from photo_feed.api.models import (
    CommentResponse,
    CreateCommentRequest,
    CreatePhotoRequest,
    PhotoPage,
    PhotoResponse,
    UpdatePhotoRequest,
)
from photo_feed.app_logging import configure_logging
from photo_feed.containers import AppContainer
from photo_feed.domain.errors import (
    BlobStorageError,
    InputValidationError,
    RecordNotFoundError,
    SyncError,
)
from photo_feed.domain.models import Principal
from photo_feed.services.photos import PhotoStore


async def get_principal(
    x_user_id: str | None = Header(default=None),
    x_user_name: str | None = Header(default=None),
) -> Principal:
    """Read the acting user forwarded by the identity proxy."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return Principal(id=x_user_id, display_name=x_user_name or x_user_id)


def get_photo_store(request: Request) -> PhotoStore:
    """Return the photo store from the app container."""
    container: AppContainer = request.app.state.container
    return container.photo_store


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(RecordNotFoundError)
    async def not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": f"{exc.kind} not found or unauthorized"},
        )

    @app.exception_handler(InputValidationError)
    async def invalid_input(
        request: Request, exc: InputValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
        )

    @app.exception_handler(SyncError)
    @app.exception_handler(BlobStorageError)
    async def storage_failure(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Storage failure on %s %s: %s", request.method, request.url.path, exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Storage operation failed"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/photos")
    async def list_photos(
        offset: int = Query(default=0, ge=0),
        limit: int = Query(default=10, ge=1),
        store: PhotoStore = Depends(get_photo_store),
    ) -> PhotoPage:
        """Return a page of the feed, newest first."""
        photos = await store.list_photos(offset, limit)
        return PhotoPage(
            photos=[PhotoResponse.from_photo(photo) for photo in photos],
            has_more=len(photos) == limit,
        )

    @app.post("/photos", status_code=status.HTTP_201_CREATED)
    async def create_photo(
        body: CreatePhotoRequest,
        principal: Principal = Depends(get_principal),
        store: PhotoStore = Depends(get_photo_store),
    ) -> PhotoResponse:
        """Upload a new photo."""
        photo = await store.create_photo(
            principal,
            title=body.title,
            image_payload=body.image,
            description=body.description,
        )
        return PhotoResponse.from_photo(photo)

    @app.get("/photos/{photo_id}")
    async def get_photo(
        photo_id: str, store: PhotoStore = Depends(get_photo_store)
    ) -> PhotoResponse:
        """Return a single photo."""
        photo = await store.get_photo(photo_id)
        if photo is None:
            raise RecordNotFoundError("Photo", photo_id)
        return PhotoResponse.from_photo(photo)

    @app.patch("/photos/{photo_id}")
    async def update_photo(
        photo_id: str,
        body: UpdatePhotoRequest,
        principal: Principal = Depends(get_principal),
        store: PhotoStore = Depends(get_photo_store),
    ) -> PhotoResponse:
        """Edit the title or description of one of the caller's photos."""
        photo = await store.update_photo(
            photo_id, principal, title=body.title, description=body.description
        )
        return PhotoResponse.from_photo(photo)

    @app.delete("/photos/{photo_id}")
    async def delete_photo(
        photo_id: str,
        principal: Principal = Depends(get_principal),
        store: PhotoStore = Depends(get_photo_store),
    ) -> dict[str, bool]:
        """Delete one of the caller's photos and its comments."""
        await store.delete_photo(photo_id, principal)
        return {"success": True}

    @app.post("/comments", status_code=status.HTTP_201_CREATED)
    async def add_comment(
        body: CreateCommentRequest,
        principal: Principal = Depends(get_principal),
        store: PhotoStore = Depends(get_photo_store),
    ) -> CommentResponse:
        """Comment on a photo."""
        comment = await store.add_comment(body.photo_id, principal, body.content)
        return CommentResponse.from_comment(comment)

    @app.delete("/comments/{comment_id}")
    async def delete_comment(
        comment_id: str,
        principal: Principal = Depends(get_principal),
        store: PhotoStore = Depends(get_photo_store),
    ) -> dict[str, bool]:
        """Delete one of the caller's comments."""
        await store.delete_comment(comment_id, principal)
        return {"success": True}

    return app
