"""Django storage configuration for uploaded files.

Uploads live in a single flat directory on local disk, served back
under ``/uploads/``.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

UPLOAD_ROOT: Final = config(
    'UPLOAD_ROOT',
    default=str(BASE_DIR.joinpath('uploads')),
)
UPLOAD_URL: Final = '/uploads/'

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.uploads.infrastructure.storage.UploadStorage',
        'OPTIONS': {
            'location': UPLOAD_ROOT,
            'base_url': UPLOAD_URL,
        },
    },
}
