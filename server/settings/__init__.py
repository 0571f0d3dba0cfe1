"""Main settings file for the upload server.

Settings are split into components and merged here with
``django-split-settings``. Values come from environment variables
or ``config/.env`` via ``python-decouple``.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/cors.py',
    'components/storages.py',
    'components/uploads.py',
)
