"""Business logic for retention sweeps of the storage root."""

import enum
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, final

from django.core.files.storage import default_storage
from django.utils import timezone

from server.apps.uploads.exceptions import (
    StorageDeleteFailedError,
    StorageListFailedError,
)
from server.apps.uploads.logic.policy import get_retention_policy
from server.apps.uploads.models import RetentionPolicy

if TYPE_CHECKING:
    from server.apps.uploads.infrastructure.storage import UploadStorage

logger = logging.getLogger(__name__)


class SweepOutcome(enum.StrEnum):
    """What happened to one stored file during a sweep."""

    DELETED = 'deleted'
    EXPIRED = 'expired'  # Would be deleted; dry run only
    RETAINED = 'retained'
    FAILED = 'failed'


@final
@dataclass(frozen=True, slots=True)
class SweepEntryResult:
    """Result of evaluating one stored file."""

    stored_name: str
    outcome: SweepOutcome
    created_at: datetime | None = None
    reason: str = ''


@final
@dataclass(frozen=True, slots=True)
class SweepReport:
    """Per-entry results of one sweep, folded into counts."""

    started_at: datetime
    results: tuple[SweepEntryResult, ...] = field(default=())

    def count(self, outcome: SweepOutcome) -> int:
        """Count entries with the given outcome."""
        return Counter(result.outcome for result in self.results)[outcome]

    @property
    def deleted(self) -> int:
        """Number of files deleted."""
        return self.count(SweepOutcome.DELETED)

    @property
    def expired(self) -> int:
        """Number of files found expired in a dry run."""
        return self.count(SweepOutcome.EXPIRED)

    @property
    def retained(self) -> int:
        """Number of files kept."""
        return self.count(SweepOutcome.RETAINED)

    @property
    def failed(self) -> int:
        """Number of files that could not be evaluated or deleted."""
        return self.count(SweepOutcome.FAILED)


def _get_storage() -> 'UploadStorage':
    """Get the configured upload storage backend.

    Returns:
        UploadStorage instance rooted at UPLOAD_ROOT.
    """
    return default_storage  # type: ignore[return-value]


def _delete_expired(storage: 'UploadStorage', stored_name: str) -> None:
    """Delete one expired file.

    Args:
        storage: Storage backend.
        stored_name: File to delete.

    Raises:
        StorageDeleteFailedError: If the file could not be deleted.
    """
    try:
        storage.delete(stored_name)
    except OSError as error:
        raise StorageDeleteFailedError(stored_name) from error


def _sweep_entry(  # noqa: WPS211
    storage: 'UploadStorage',
    stored_name: str,
    policy: RetentionPolicy,
    now: datetime,
    dry_run: bool,
) -> SweepEntryResult:
    """Evaluate one stored file and delete it if expired.

    Errors are captured in the result instead of raised, so one bad
    entry never stops the sweep.

    Args:
        storage: Storage backend.
        stored_name: File to evaluate.
        policy: Retention policy.
        now: Reference time for the whole sweep.
        dry_run: Report expired files without deleting them.

    Returns:
        SweepEntryResult for the file.
    """
    try:
        created_at = storage.get_created_time(stored_name)
    except FileNotFoundError:
        # Removed since the listing was taken
        return SweepEntryResult(
            stored_name=stored_name,
            outcome=SweepOutcome.RETAINED,
            reason='already gone',
        )
    except OSError as error:
        logger.warning('Failed to stat stored file %s: %s', stored_name, error)
        return SweepEntryResult(
            stored_name=stored_name,
            outcome=SweepOutcome.FAILED,
            reason=str(error),
        )

    if now - created_at <= policy.max_age:
        return SweepEntryResult(
            stored_name=stored_name,
            outcome=SweepOutcome.RETAINED,
            created_at=created_at,
        )

    if dry_run:
        return SweepEntryResult(
            stored_name=stored_name,
            outcome=SweepOutcome.EXPIRED,
            created_at=created_at,
        )

    try:
        _delete_expired(storage, stored_name)
    except StorageDeleteFailedError as error:
        return SweepEntryResult(
            stored_name=stored_name,
            outcome=SweepOutcome.FAILED,
            created_at=created_at,
            reason=str(error.__cause__ or error),
        )

    logger.info('Deleted expired upload: %s', stored_name)
    return SweepEntryResult(
        stored_name=stored_name,
        outcome=SweepOutcome.DELETED,
        created_at=created_at,
    )


def sweep_storage(
    storage: 'UploadStorage | None' = None,
    policy: RetentionPolicy | None = None,
    now: datetime | None = None,
    dry_run: bool = False,
) -> SweepReport:
    """Delete stored files older than the retention window.

    Only files directly under the storage root are considered. A file
    created after the listing is taken waits for the next sweep.

    Args:
        storage: Storage backend. Defaults to the configured one.
        policy: Retention policy. Defaults to settings.
        now: Reference time. Defaults to now.
        dry_run: Report expired files without deleting them.

    Returns:
        SweepReport with one result per listed file.

    Raises:
        StorageListFailedError: If the storage root cannot be listed.
    """
    if storage is None:
        storage = _get_storage()
    if policy is None:
        policy = get_retention_policy()
    if now is None:
        now = timezone.now()

    try:
        stored_names = storage.list_files()
    except OSError as error:
        logger.exception('Failed to list storage root: %s', storage.location)
        raise StorageListFailedError(str(error)) from error

    report = SweepReport(
        started_at=now,
        results=tuple(
            _sweep_entry(storage, stored_name, policy, now, dry_run)
            for stored_name in stored_names
        ),
    )

    logger.info(
        'Sweep finished: %d deleted, %d expired, %d retained, %d failed',
        report.deleted,
        report.expired,
        report.retained,
        report.failed,
    )
    return report
