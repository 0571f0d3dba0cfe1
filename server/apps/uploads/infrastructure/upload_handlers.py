"""Django upload handler that enforces upload limits while streaming."""

import logging
from typing import Any, Final, override

from django.core.files.uploadhandler import FileUploadHandler, SkipFile

from server.apps.uploads.exceptions import (
    IngestError,
    PayloadTooLargeError,
    UnsupportedTypeError,
)
from server.apps.uploads.logic.policy import get_upload_limits

UPLOAD_FIELD_NAME: Final = 'file'

logger = logging.getLogger(__name__)


class UploadGuardHandler(FileUploadHandler):
    """Reject upload parts before the default handlers buffer them.

    Must be listed first in FILE_UPLOAD_HANDLERS. For the upload field:
    - a disallowed declared type is skipped before any byte is read
    - once received bytes cross the size limit the part is skipped and
      the rest of its stream is discarded

    The rejection is kept on the handler so the view can report it.
    """

    def __init__(self, request: Any = None) -> None:
        """Initialize handler with the current upload limits.

        Args:
            request: Request being parsed.
        """
        super().__init__(request)
        self.limits = get_upload_limits()
        self.received_bytes = 0
        self.guarding = False
        self.rejection: IngestError | None = None

    @override
    def new_file(self, field_name: str, *args: Any, **kwargs: Any) -> None:
        """Start guarding a new file part.

        Args:
            field_name: Multipart field name.
            args: File name, content type and the rest, as Django passes them.
            kwargs: Extra keyword arguments from Django.

        Raises:
            SkipFile: If the declared type is not allowed.
        """
        super().new_file(field_name, *args, **kwargs)
        self.guarding = field_name == UPLOAD_FIELD_NAME
        self.received_bytes = 0
        if self.guarding and not self.limits.allows(self.content_type or ''):
            logger.warning(
                'Skipping upload with disallowed type: %s',
                self.content_type,
            )
            self.rejection = UnsupportedTypeError(self.content_type or '')
            raise SkipFile

    @override
    def receive_data_chunk(self, raw_data: bytes, start: int) -> bytes:
        """Count bytes and pass the chunk on to the next handler.

        Args:
            raw_data: Chunk of file content.
            start: Offset of the chunk within the file.

        Returns:
            The chunk, unchanged.

        Raises:
            SkipFile: Once the size limit is crossed.
        """
        if self.guarding:
            self.received_bytes += len(raw_data)
            if self.received_bytes > self.limits.max_size_bytes:
                logger.warning(
                    'Skipping upload over size limit: %d > %d bytes',
                    self.received_bytes,
                    self.limits.max_size_bytes,
                )
                self.rejection = PayloadTooLargeError(
                    limit_bytes=self.limits.max_size_bytes,
                    size_bytes=self.received_bytes,
                )
                raise SkipFile
        return raw_data

    @override
    def file_complete(self, file_size: int) -> None:
        """Leave file construction to the handlers that buffered it."""
        return None


def get_upload_rejection(request: Any) -> IngestError | None:
    """Get the rejection recorded while parsing the request, if any.

    Args:
        request: Request whose FILES were already parsed.

    Returns:
        IngestError raised by UploadGuardHandler, or None.
    """
    for handler in request.upload_handlers:
        if not isinstance(handler, UploadGuardHandler):
            continue
        if handler.rejection is not None:
            return handler.rejection
    return None
