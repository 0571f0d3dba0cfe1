"""Core Django settings.

There is no database: the upload directory is the only durable state.
"""

from decouple import Csv

from server.settings.components import BASE_DIR, config

SECRET_KEY = config(
    'DJANGO_SECRET_KEY',
    default='insecure-local-upload-server-key',
)
DEBUG = config('DJANGO_DEBUG', cast=bool, default=False)
ALLOWED_HOSTS = config(
    'DJANGO_ALLOWED_HOSTS',
    cast=Csv(),
    default='localhost,127.0.0.1',
)

INSTALLED_APPS = [
    'corsheaders',
    'server.apps.uploads',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'server.apps.uploads.middleware.RequestLoggingMiddleware',
]

ROOT_URLCONF = 'server.urls'
WSGI_APPLICATION = 'server.wsgi.application'

DATABASES: dict[str, dict[str, str]] = {}

TIME_ZONE = 'UTC'
USE_TZ = True

# Sends X-Content-Type-Options: nosniff on every response
SECURE_CONTENT_TYPE_NOSNIFF = True

APPEND_SLASH = False
