"""Upload validation, retention and server settings."""

from decouple import Csv

from server.settings.components import config

UPLOAD_SERVER_HOST = config('UPLOAD_SERVER_HOST', default='0.0.0.0')  # noqa: S104
UPLOAD_SERVER_PORT = config('PORT', cast=int, default=3000)

# 10 MiB
UPLOAD_MAX_SIZE_BYTES = config(
    'UPLOAD_MAX_SIZE_BYTES',
    cast=int,
    default=10 * 1024 * 1024,
)
UPLOAD_ALLOWED_MIME_TYPES = config(
    'UPLOAD_ALLOWED_MIME_TYPES',
    cast=Csv(post_process=frozenset),
    default=(
        'image/jpeg,image/png,image/gif,image/webp,'
        'video/mp4,video/mpeg,video/quicktime'
    ),
)

# 24 hours, in milliseconds
UPLOAD_RETENTION_MAX_AGE_MS = config(
    'UPLOAD_RETENTION_MAX_AGE_MS',
    cast=int,
    default=24 * 60 * 60 * 1000,
)
UPLOAD_SWEEP_INTERVAL_MS = config(
    'UPLOAD_SWEEP_INTERVAL_MS',
    cast=int,
    default=24 * 60 * 60 * 1000,
)

# Our guard runs first so rejected parts are never buffered
FILE_UPLOAD_HANDLERS = [
    'server.apps.uploads.infrastructure.upload_handlers.UploadGuardHandler',
    'django.core.files.uploadhandler.MemoryFileUploadHandler',
    'django.core.files.uploadhandler.TemporaryFileUploadHandler',
]
