"""Upload limits and retention policy built from settings."""

from typing import Final

from django.conf import settings

from server.apps.uploads.models import RetentionPolicy, UploadLimits

_DEFAULT_MAX_SIZE_BYTES: Final = 10 * 1024 * 1024
_DEFAULT_ALLOWED_MIME_TYPES: Final = frozenset((
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
    'video/mp4',
    'video/mpeg',
    'video/quicktime',
))
_DAY_MILLIS: Final = 24 * 60 * 60 * 1000


def get_upload_limits() -> UploadLimits:
    """Get upload validation limits.

    Returns:
        UploadLimits from settings, falling back to 10 MiB and the
        default image/video allow-set.
    """
    return UploadLimits(
        max_size_bytes=getattr(
            settings,
            'UPLOAD_MAX_SIZE_BYTES',
            _DEFAULT_MAX_SIZE_BYTES,
        ),
        allowed_mime_types=frozenset(getattr(
            settings,
            'UPLOAD_ALLOWED_MIME_TYPES',
            _DEFAULT_ALLOWED_MIME_TYPES,
        )),
    )


def get_retention_policy() -> RetentionPolicy:
    """Get retention policy.

    Returns:
        RetentionPolicy from settings, defaulting to 24 hours for both
        the maximum age and the sweep interval.
    """
    return RetentionPolicy(
        max_age_millis=getattr(
            settings,
            'UPLOAD_RETENTION_MAX_AGE_MS',
            _DAY_MILLIS,
        ),
        sweep_interval_millis=getattr(
            settings,
            'UPLOAD_SWEEP_INTERVAL_MS',
            _DAY_MILLIS,
        ),
    )
