"""CORS settings for browser clients (django-cors-headers)."""

from decouple import Csv

from server.settings.components import config

CORS_ALLOWED_ORIGINS = config(
    'CORS_ALLOWED_ORIGINS',
    cast=Csv(),
    default=(
        'http://localhost:8000,'
        'http://127.0.0.1:5500,'
        'http://localhost:3000'
    ),
)
CORS_ALLOW_METHODS = ('GET', 'POST', 'OPTIONS')
CORS_ALLOW_HEADERS = ('content-type', 'authorization')
CORS_ALLOW_CREDENTIALS = True
