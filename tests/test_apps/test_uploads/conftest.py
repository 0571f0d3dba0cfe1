"""Shared fixtures for uploads app tests."""

import os
from datetime import timedelta
from io import BytesIO
from pathlib import Path

import pytest
from django.core.files.storage import storages
from django.utils import timezone

from server.apps.uploads.infrastructure.storage import UploadStorage
from server.apps.uploads.models import (
    RetentionPolicy,
    UploadCandidate,
    UploadLimits,
)

_DAY_MILLIS = 24 * 60 * 60 * 1000


@pytest.fixture
def upload_root(tmp_path):
    """Storage root path that does not exist yet.

    Returns:
        Path of the storage root.
    """
    return tmp_path / 'uploads'


@pytest.fixture
def upload_storage(upload_root):
    """Upload storage rooted in a temporary directory.

    Returns:
        UploadStorage instance.
    """
    return UploadStorage(location=str(upload_root), base_url='/uploads/')


@pytest.fixture
def configured_storage(settings, upload_root):
    """Point the default storage at a temporary directory.

    Returns:
        The default UploadStorage instance.
    """
    settings.STORAGES = {
        'default': {
            'BACKEND': (
                'server.apps.uploads.infrastructure.storage.UploadStorage'
            ),
            'OPTIONS': {
                'location': str(upload_root),
                'base_url': '/uploads/',
            },
        },
    }
    return storages['default']


@pytest.fixture
def upload_limits():
    """Default upload limits (10 MiB, images and videos).

    Returns:
        UploadLimits instance.
    """
    return UploadLimits(
        max_size_bytes=10 * 1024 * 1024,
        allowed_mime_types=frozenset((
            'image/jpeg',
            'image/png',
            'image/gif',
            'image/webp',
            'video/mp4',
            'video/mpeg',
            'video/quicktime',
        )),
    )


@pytest.fixture
def retention_policy():
    """Retention policy of 24 hours for both age and interval.

    Returns:
        RetentionPolicy instance.
    """
    return RetentionPolicy(
        max_age_millis=_DAY_MILLIS,
        sweep_interval_millis=_DAY_MILLIS,
    )


@pytest.fixture
def png_candidate():
    """2 KB PNG upload named photo.png.

    Returns:
        UploadCandidate with 2048 bytes of content.
    """
    content = b'\x89PNG\r\n\x1a\n' + b'0' * 2040
    return UploadCandidate(
        declared_mime_type='image/png',
        original_filename='photo.png',
        size_bytes=len(content),
        content=BytesIO(content),
    )


@pytest.fixture
def stored_file_factory(upload_root):
    """Create files under the storage root with a given age.

    Returns:
        Callable taking a name and an age, returning the file path.
    """
    def factory(name: str, age: timedelta = timedelta(0)) -> Path:  # noqa: WPS430
        upload_root.mkdir(parents=True, exist_ok=True)
        file_path = upload_root / name
        file_path.write_bytes(b'stored content')
        timestamp = (timezone.now() - age).timestamp()
        os.utime(file_path, (timestamp, timestamp))
        return file_path

    return factory
