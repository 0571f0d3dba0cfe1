"""Local filesystem storage backend for uploaded files."""

import logging
import os
from datetime import UTC, datetime
from typing import Any, final, override

from django.core.files.storage import FileSystemStorage

from server.apps.uploads.infrastructure.metadata import (
    build_stored_name,
    extract_type_tag,
)

logger = logging.getLogger(__name__)


@final
class UploadStorage(FileSystemStorage):
    """Flat-directory storage for uploads.

    Extends Django's FileSystemStorage with:
    - Logging around saves and deletes
    - Best-effort rollback of partial writes
    - Name regeneration in the upload naming scheme on collision
    - Creation time that survives on filesystems without birth time
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to disk with error handling and logging.

        Args:
            name: Requested stored name.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual stored name (differs from name on collision).

        Raises:
            OSError: If the write fails.
        """
        try:
            logger.debug('Writing file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Stored file: %s', saved_name)
        except Exception:
            logger.exception('Failed to write file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file from disk with logging.

        A file that is already gone is not an error.

        Args:
            name: Stored name of the file to delete.

        Raises:
            OSError: If deletion fails for any other reason.
        """
        try:
            super().delete(name)
            logger.info('Deleted file from storage: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Remove a partially written upload.

        This is a best-effort operation: if deletion fails, the error
        is logged and the retention sweep removes the file later.

        Args:
            name: Stored name of the partial file.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.delete(name)
        except Exception:
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )

    @override
    def _save(self, name: str, content: Any) -> str:
        """Write content under a name this call creates exclusively.

        A name taken since ``get_available_name`` ran is replaced by an
        alternative. Once the file is created, a failed write removes
        that file and nothing else, so an existing upload is never
        touched.

        Args:
            name: Available stored name.
            content: Django File to copy from.

        Returns:
            Name the content was written under.

        Raises:
            OSError: If the file cannot be created or written.
        """
        os.makedirs(self.location, exist_ok=True)
        while True:
            try:
                fd = os.open(self.path(name), self.OS_OPEN_FLAGS, 0o666)
            except FileExistsError:
                name = self.get_available_name(name)
            else:
                break

        try:
            with os.fdopen(fd, 'wb') as destination:
                for chunk in content.chunks():
                    destination.write(chunk)
            if self.file_permissions_mode is not None:
                os.chmod(self.path(name), self.file_permissions_mode)
        except OSError:
            self.rollback_upload(name)
            raise
        return name

    @override
    def get_alternative_name(self, file_root: str, file_ext: str) -> str:
        """Generate a fresh stored name when the requested one exists.

        Django calls this both before writing and when an exclusive
        create loses a race, so names always keep the upload format.

        Args:
            file_root: Requested name without extension.
            file_ext: Extension including the dot.

        Returns:
            New candidate stored name.
        """
        alternative = build_stored_name(extract_type_tag(file_root), file_ext)
        logger.warning(
            'Stored name collision on %s%s, retrying as %s',
            file_root,
            file_ext,
            alternative,
        )
        return alternative

    @override
    def get_created_time(self, name: str) -> datetime:
        """Get creation time of a stored file.

        Uses birth time where the platform reports it. Stored files are
        never modified after the write, so modification time stands in
        for it elsewhere; the earlier of the two wins.

        Args:
            name: Stored name.

        Returns:
            Aware UTC datetime.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        stat_result = os.stat(self.path(name))
        timestamp = min(
            getattr(stat_result, 'st_birthtime', stat_result.st_mtime),
            stat_result.st_mtime,
        )
        return datetime.fromtimestamp(timestamp, tz=UTC)

    def list_files(self) -> list[str]:
        """List stored files directly under the storage root.

        Subdirectories are ignored; the store is flat. A missing root
        is an empty store.

        Returns:
            Sorted stored names.

        Raises:
            OSError: If the root exists but cannot be listed.
        """
        try:
            _, files = self.listdir('')
        except FileNotFoundError:
            logger.debug('Storage root does not exist yet: %s', self.location)
            return []
        return sorted(files)
