"""Periodic retention sweeper."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Final, final

from apscheduler.schedulers.background import BackgroundScheduler
from django.utils import timezone

from server.apps.uploads.exceptions import StorageListFailedError
from server.apps.uploads.logic.policy import get_retention_policy
from server.apps.uploads.logic.retention_operations import (
    SweepReport,
    sweep_storage,
)
from server.apps.uploads.models import RetentionPolicy

if TYPE_CHECKING:
    from apscheduler.schedulers.base import BaseScheduler

    from server.apps.uploads.infrastructure.storage import UploadStorage

_JOB_ID: Final = 'uploads-retention-sweep'

logger = logging.getLogger(__name__)


def _build_scheduler() -> BackgroundScheduler:
    return BackgroundScheduler(daemon=True, timezone='UTC')


@final
class RetentionSweeper:
    """Owns the periodic sweep of the storage root.

    Runs ``run_once`` every ``sweep_interval_millis`` on a background
    scheduler thread. At most one sweep runs at a time; missed runs
    are coalesced into one. A stopped scheduler cannot be started
    again, so every ``start`` builds a new one.
    """

    def __init__(
        self,
        policy: RetentionPolicy | None = None,
        storage: 'UploadStorage | None' = None,
        scheduler_factory: Callable[[], 'BaseScheduler'] | None = None,
    ) -> None:
        """Initialize sweeper.

        Args:
            policy: Retention policy. Defaults to settings.
            storage: Storage backend. Defaults to the configured one.
            scheduler_factory: Builds the APScheduler instance for each
                start. Defaults to a daemon BackgroundScheduler in UTC.
        """
        self.policy = policy or get_retention_policy()
        self.storage = storage
        self.scheduler_factory = scheduler_factory or _build_scheduler
        self.scheduler: 'BaseScheduler | None' = None

    @property
    def running(self) -> bool:
        """Whether the sweep schedule is active."""
        return self.scheduler is not None and bool(self.scheduler.running)

    def start(self) -> None:
        """Schedule periodic sweeps.

        The first sweep runs one interval after start. Starting an
        already running sweeper does nothing.
        """
        if self.running:
            logger.warning('Retention sweeper already running')
            return

        self.scheduler = self.scheduler_factory()
        self.scheduler.add_job(
            self.run_once,
            trigger='interval',
            seconds=self.policy.sweep_interval_seconds,
            id=_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(
            'Retention sweeper started: max age %d ms, interval %d ms',
            self.policy.max_age_millis,
            self.policy.sweep_interval_millis,
        )

    def stop(self, wait: bool = False) -> None:
        """Stop scheduling sweeps.

        Args:
            wait: Block until an in-flight sweep finishes.
        """
        if self.scheduler is None or not self.running:
            return
        self.scheduler.shutdown(wait=wait)
        logger.info('Retention sweeper stopped')

    def run_once(self) -> SweepReport:
        """Run one sweep now.

        Never raises: a storage root that cannot be listed is logged
        and yields an empty report, and the next run tries again.

        Returns:
            SweepReport of this run.
        """
        try:
            return sweep_storage(storage=self.storage, policy=self.policy)
        except StorageListFailedError as error:
            logger.error('Sweep skipped, storage root unreadable: %s', error)
            return SweepReport(started_at=timezone.now())
