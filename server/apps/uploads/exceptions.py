"""Exceptions for uploads app."""

from http import HTTPStatus


class IngestError(Exception):
    """Base class for rejected or failed uploads.

    Each subclass maps to the HTTP status the upload endpoint answers with.
    """

    status_code: int = HTTPStatus.BAD_REQUEST


class NoFileProvidedError(IngestError):
    """Raised when the request carried no file part."""

    def __init__(self) -> None:
        """Initialize NoFileProvidedError."""
        super().__init__('No file was uploaded')


class UnsupportedTypeError(IngestError):
    """Raised when the declared MIME type is not in the allow-set."""

    def __init__(self, mime_type: str) -> None:
        """Initialize UnsupportedTypeError.

        Args:
            mime_type: Declared MIME type of the rejected upload.
        """
        self.mime_type = mime_type
        super().__init__(f'File type is not allowed: {mime_type or "unknown"}')


class PayloadTooLargeError(IngestError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE

    def __init__(self, limit_bytes: int, size_bytes: int) -> None:
        """Initialize PayloadTooLargeError.

        Args:
            limit_bytes: Maximum accepted size in bytes.
            size_bytes: Bytes seen before the upload was cut off.
        """
        self.limit_bytes = limit_bytes
        self.size_bytes = size_bytes
        super().__init__(
            f'File is too large: limit is {limit_bytes} bytes, '
            f'received at least {size_bytes} bytes',
        )


class StorageWriteFailedError(IngestError):
    """Raised when accepted bytes could not be written to storage."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, stored_name: str) -> None:
        """Initialize StorageWriteFailedError.

        Args:
            stored_name: Name the upload was being written under.
        """
        self.stored_name = stored_name
        super().__init__(f'Failed to write upload to storage: {stored_name}')


class StorageError(Exception):
    """Base class for storage errors hit during a retention sweep."""


class StorageListFailedError(StorageError):
    """Raised when the storage root cannot be listed."""


class StorageDeleteFailedError(StorageError):
    """Raised when an expired file cannot be deleted."""

    def __init__(self, stored_name: str) -> None:
        """Initialize StorageDeleteFailedError.

        Args:
            stored_name: Name of the file that could not be deleted.
        """
        self.stored_name = stored_name
        super().__init__(f'Failed to delete stored file: {stored_name}')
