"""Domain records for uploads app.

There are no database tables: the storage directory is the only
durable store, and these records describe what flows through it.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, BinaryIO, Final, final

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile

_MIME_SEPARATOR: Final = '/'


def get_type_tag(mime_type: str) -> str:
    """Extract the top-level type from a MIME type.

    Example: 'image/png' -> 'image'

    Args:
        mime_type: Full MIME type.

    Returns:
        Segment before the first '/'.
    """
    return mime_type.split(_MIME_SEPARATOR, 1)[0]


@final
@dataclass(frozen=True, slots=True)
class UploadCandidate:
    """A single uploaded file, as decoded by the HTTP layer.

    Nothing here is trusted: the MIME type and size are as declared by
    the client, and the filename is used only for display and extension.
    """

    declared_mime_type: str
    original_filename: str
    size_bytes: int
    content: BinaryIO

    @classmethod
    def from_uploaded_file(cls, uploaded: 'UploadedFile') -> 'UploadCandidate':
        """Build a candidate from a Django uploaded file.

        Args:
            uploaded: File taken from ``request.FILES``.

        Returns:
            UploadCandidate wrapping the uploaded file.
        """
        return cls(
            declared_mime_type=uploaded.content_type or '',
            original_filename=uploaded.name or '',
            size_bytes=uploaded.size or 0,
            content=uploaded,
        )


@final
@dataclass(frozen=True, slots=True)
class StoredFile:
    """An accepted upload persisted under the storage root.

    Never updated in place; its only lifecycle event after creation is
    deletion by the retention sweeper.
    """

    stored_name: str
    original_name: str
    mime_type: str
    size_bytes: int
    path: str
    created_at: datetime

    @property
    def type_tag(self) -> str:
        """Top-level MIME type ('image' or 'video')."""
        return get_type_tag(self.mime_type)


@final
@dataclass(frozen=True, slots=True)
class UploadLimits:
    """Validation rules applied to every upload."""

    max_size_bytes: int
    allowed_mime_types: frozenset[str]

    def allows(self, mime_type: str) -> bool:
        """Check whether a MIME type is in the allow-set.

        Args:
            mime_type: Declared MIME type.

        Returns:
            True if uploads of this type are accepted.
        """
        return mime_type in self.allowed_mime_types


@final
@dataclass(frozen=True, slots=True)
class RetentionPolicy:
    """How long stored files live and how often they are swept."""

    max_age_millis: int
    sweep_interval_millis: int

    @property
    def max_age(self) -> timedelta:
        """Maximum file age as a timedelta."""
        return timedelta(milliseconds=self.max_age_millis)

    @property
    def sweep_interval_seconds(self) -> float:
        """Sweep interval in seconds, as schedulers expect it."""
        return self.sweep_interval_millis / 1000
