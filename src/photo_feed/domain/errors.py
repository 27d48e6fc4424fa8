"""Error types raised by the photo feed."""


class PhotoFeedError(Exception):
    """Base class for photo feed errors."""


class BlobStorageError(PhotoFeedError):
    """Raised when the object store answers with an unexpected status."""

    def __init__(self, message: str, status_code: int | None, body: str = "") -> None:
        super().__init__(f"{message} (status={status_code})")
        self.status_code = status_code
        self.body = body


class BlobNotFoundError(BlobStorageError):
    """Raised when a requested blob does not exist."""


class SnapshotDecodeError(PhotoFeedError):
    """Raised when a persisted index snapshot cannot be parsed."""


class RecordNotFoundError(PhotoFeedError):
    """Raised when a photo or comment is missing or not visible to the caller."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} {record_id} not found or unauthorized")
        self.kind = kind
        self.record_id = record_id


class OwnershipError(RecordNotFoundError):
    """Raised when the caller does not own the target record."""


class InputValidationError(PhotoFeedError):
    """Raised when required input is missing or malformed."""


class SyncError(PhotoFeedError):
    """Raised when rewriting the remote indexes fails."""
