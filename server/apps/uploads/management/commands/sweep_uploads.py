"""Management command to delete expired uploads once."""

import logging
from dataclasses import replace
from typing import Any, Final, final, override

from django.core.management.base import BaseCommand, CommandError

from server.apps.uploads.exceptions import StorageListFailedError
from server.apps.uploads.logic.policy import get_retention_policy
from server.apps.uploads.logic.retention_operations import (
    SweepOutcome,
    sweep_storage,
)

_HOUR_MILLIS: Final = 60 * 60 * 1000

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Delete uploads older than the retention window."""

    help = 'Delete uploads older than the retention window (one sweep)'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--max-age-hours',
            type=float,
            default=None,
            help='Override the configured maximum age, in hours',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the sweep.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If the storage root cannot be listed.
        """
        dry_run = options['dry_run']
        policy = get_retention_policy()
        if options['max_age_hours'] is not None:
            policy = replace(
                policy,
                max_age_millis=int(options['max_age_hours'] * _HOUR_MILLIS),
            )

        self.stdout.write(
            f'Looking for uploads older than {policy.max_age}',
        )

        try:
            report = sweep_storage(policy=policy, dry_run=dry_run)
        except StorageListFailedError as exc:
            raise CommandError(f'Cannot list storage root: {exc}') from exc

        for result in report.results:
            if result.outcome == SweepOutcome.EXPIRED:
                self.stdout.write(
                    f'Would delete: {result.stored_name} '
                    f'(created: {result.created_at})',
                )
            elif result.outcome == SweepOutcome.FAILED:
                self.stderr.write(
                    f'Failed to sweep {result.stored_name}: {result.reason}',
                )
                logger.warning(
                    'Manual sweep could not remove %s: %s',
                    result.stored_name,
                    result.reason,
                )

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Would delete {report.expired} files',
                ),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Deleted {report.deleted} files, '
                    f'{report.retained} retained, {report.failed} failed',
                ),
            )
