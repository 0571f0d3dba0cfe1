"""Naming and metadata utilities for stored uploads."""

import re
import secrets
from datetime import datetime
from pathlib import PurePosixPath
from typing import Final

from django.utils import timezone

# Only short alphanumeric suffixes survive from client filenames
_EXTENSION_PATTERN: Final = re.compile(r'\.[A-Za-z0-9]{1,16}')
_TYPE_TAG_UNSAFE: Final = re.compile(r'[^a-z0-9]')
_DEFAULT_TYPE_TAG: Final = 'file'
_RANDOM_UPPER_BOUND: Final = 10**9


def get_safe_extension(filename: str) -> str:
    """Get a filesystem-safe extension from a client filename.

    Directory components are discarded (both '/' and '\\' separators)
    and the suffix is kept only if it is a short alphanumeric one.

    Args:
        filename: Original filename as sent by the client.

    Returns:
        Extension including the dot (e.g., '.png'), or empty string.
    """
    basename = PurePosixPath(filename.replace('\\', '/')).name
    extension = PurePosixPath(basename).suffix
    if not _EXTENSION_PATTERN.fullmatch(extension):
        return ''
    return extension


def sanitize_type_tag(type_tag: str) -> str:
    """Reduce a MIME top-level type to a safe filename prefix.

    Args:
        type_tag: Segment before '/' in the MIME type.

    Returns:
        Lowercase alphanumeric tag, 'file' if nothing is left.
    """
    return _TYPE_TAG_UNSAFE.sub('', type_tag.lower()) or _DEFAULT_TYPE_TAG


def to_epoch_millis(moment: datetime) -> int:
    """Convert an aware datetime to milliseconds since the epoch."""
    return int(moment.timestamp() * 1000)


def build_stored_name(
    type_tag: str,
    extension: str,
    moment: datetime | None = None,
) -> str:
    """Compose a collision-resistant stored filename.

    Format: ``{type_tag}_{epoch_millis}_{random}{extension}``, for example
    'image_1760880000000_482913377.png'. Timestamp plus random suffix
    makes collisions unlikely but not impossible; the storage backend
    regenerates the name if it already exists.

    Args:
        type_tag: Top-level MIME type ('image', 'video').
        extension: Safe extension including the dot, or empty string.
        moment: Timestamp to embed. Defaults to now.

    Returns:
        Stored filename.
    """
    if moment is None:
        moment = timezone.now()
    random_suffix = secrets.randbelow(_RANDOM_UPPER_BOUND)
    return '{tag}_{millis}_{suffix}{extension}'.format(
        tag=sanitize_type_tag(type_tag),
        millis=to_epoch_millis(moment),
        suffix=random_suffix,
        extension=extension,
    )


def extract_type_tag(stored_name: str) -> str:
    """Extract the type tag from a stored filename.

    Example: 'video_1760880000000_12.mp4' -> 'video'

    Args:
        stored_name: Name produced by build_stored_name.

    Returns:
        Type tag prefix.
    """
    return stored_name.split('_', 1)[0]
