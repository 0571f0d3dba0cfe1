"""Business logic for upload ingest."""

import logging
import tempfile
from typing import TYPE_CHECKING, BinaryIO, Final

from django.conf import settings
from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage
from django.utils import timezone

from server.apps.uploads.exceptions import (
    IngestError,
    NoFileProvidedError,
    PayloadTooLargeError,
    StorageWriteFailedError,
    UnsupportedTypeError,
)
from server.apps.uploads.infrastructure.metadata import (
    build_stored_name,
    get_safe_extension,
)
from server.apps.uploads.logic.policy import get_upload_limits
from server.apps.uploads.models import (
    StoredFile,
    UploadCandidate,
    UploadLimits,
    get_type_tag,
)

if TYPE_CHECKING:
    from server.apps.uploads.infrastructure.storage import UploadStorage

_CHUNK_SIZE: Final = 64 * 1024  # Same chunk size as Django's upload parser
_DEFAULT_SPOOL_BYTES: Final = 2621440  # Django's FILE_UPLOAD_MAX_MEMORY_SIZE

logger = logging.getLogger(__name__)


def _get_storage() -> 'UploadStorage':
    """Get the configured upload storage backend.

    Returns:
        UploadStorage instance rooted at UPLOAD_ROOT.
    """
    return default_storage  # type: ignore[return-value]


def validate_candidate(
    candidate: UploadCandidate | None,
    limits: UploadLimits,
) -> UploadCandidate:
    """Check an upload candidate against the upload limits.

    Checks run in order: presence, declared type, declared size.

    Args:
        candidate: Decoded upload, or None if the request had no file.
        limits: Validation rules.

    Returns:
        The candidate, once it passed every check.

    Raises:
        NoFileProvidedError: If there is no candidate.
        UnsupportedTypeError: If the declared type is not allowed.
        PayloadTooLargeError: If the declared size exceeds the limit.
    """
    if candidate is None:
        raise NoFileProvidedError
    if not limits.allows(candidate.declared_mime_type):
        raise UnsupportedTypeError(candidate.declared_mime_type)
    if candidate.size_bytes > limits.max_size_bytes:
        raise PayloadTooLargeError(
            limit_bytes=limits.max_size_bytes,
            size_bytes=candidate.size_bytes,
        )
    return candidate


def _stage_content(
    content: BinaryIO,
    max_size_bytes: int,
) -> tuple[tempfile.SpooledTemporaryFile[bytes], int]:
    """Copy upload content to a spool outside the storage root.

    Reading stops at the first chunk that crosses the limit, so a
    stream that lies about its size is never buffered in full and
    nothing partial ever lands in the storage root.

    Args:
        content: Upload byte stream.
        max_size_bytes: Size limit in bytes.

    Returns:
        Tuple of spool positioned at start and the number of bytes read.

    Raises:
        PayloadTooLargeError: If the stream is longer than the limit.
    """
    spool = tempfile.SpooledTemporaryFile(
        max_size=getattr(
            settings,
            'FILE_UPLOAD_MAX_MEMORY_SIZE',
            _DEFAULT_SPOOL_BYTES,
        ),
    )
    received_bytes = 0
    for chunk in iter(lambda: content.read(_CHUNK_SIZE), b''):
        received_bytes += len(chunk)
        if received_bytes > max_size_bytes:
            spool.close()
            raise PayloadTooLargeError(
                limit_bytes=max_size_bytes,
                size_bytes=received_bytes,
            )
        spool.write(chunk)
    spool.seek(0)
    return spool, received_bytes


def ingest(
    candidate: UploadCandidate | None,
    storage: 'UploadStorage | None' = None,
    limits: UploadLimits | None = None,
) -> StoredFile:
    """Validate an upload and persist it under a synthesized name.

    The storage root is created on first write. On any rejection no
    file is left under the storage root.

    Args:
        candidate: Decoded upload, or None if the request had no file.
        storage: Storage backend. Defaults to the configured one.
        limits: Validation rules. Defaults to settings.

    Returns:
        StoredFile describing the written file.

    Raises:
        NoFileProvidedError: If there is no candidate.
        UnsupportedTypeError: If the declared type is not allowed.
        PayloadTooLargeError: If the upload exceeds the size limit.
        StorageWriteFailedError: If writing to storage fails.
    """
    if limits is None:
        limits = get_upload_limits()
    if storage is None:
        storage = _get_storage()

    try:
        candidate = validate_candidate(candidate, limits)
        staged, size_bytes = _stage_content(
            candidate.content,
            limits.max_size_bytes,
        )
    except IngestError as error:
        logger.warning('Upload rejected: %s', error)
        raise

    requested_name = build_stored_name(
        get_type_tag(candidate.declared_mime_type),
        get_safe_extension(candidate.original_filename),
    )

    with staged:
        try:
            stored_name = storage.save(
                requested_name,
                DjangoFile(staged, name=requested_name),
            )
        except OSError as error:
            # Storage has already removed whatever this call created
            raise StorageWriteFailedError(requested_name) from error

    stored_file = StoredFile(
        stored_name=stored_name,
        original_name=candidate.original_filename,
        mime_type=candidate.declared_mime_type,
        size_bytes=size_bytes,
        path=storage.url(stored_name),
        created_at=timezone.now(),
    )
    logger.info(
        'Upload accepted: %s -> %s (%d bytes, %s)',
        candidate.original_filename,
        stored_name,
        size_bytes,
        candidate.declared_mime_type,
    )
    return stored_file
