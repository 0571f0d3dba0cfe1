"""Django management command to run the upload server."""

import logging
import os
import shlex
import sys
from typing import Any, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.core.wsgi import get_wsgi_application

from server.apps.uploads.logic.sweeper import RetentionSweeper

logger = logging.getLogger(__name__)

# Set in the child process started by --reload
_RELOAD_ENV_VAR = 'UPLOAD_SERVER_RELOAD_SUBPROCESS'


@final
class Command(BaseCommand):
    """Run the upload server using cheroot WSGI server."""

    help = 'Run the upload server and its retention sweeper'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: from settings)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: from settings)',
        )
        parser.add_argument(
            '--no-sweeper',
            action='store_true',
            default=False,
            help='Do not schedule retention sweeps in this process',
        )
        parser.add_argument(
            '--reload',
            action='store_true',
            default=False,
            help='Enable auto-reload on code changes (development only)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Serve, or watch sources and serve from a child with --reload.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        in_reload_child = os.environ.get(_RELOAD_ENV_VAR) == 'true'
        if options['reload'] and not in_reload_child:
            self._run_with_reload(options)
            return
        self._run_server(options)

    def _run_server(self, options: dict[str, Any]) -> None:
        """Run the sweeper and the WSGI server until interrupted.

        Args:
            options: Command options.
        """
        host = options['host'] or getattr(
            settings,
            'UPLOAD_SERVER_HOST',
            '0.0.0.0',  # noqa: S104
        )
        port = options['port'] or getattr(settings, 'UPLOAD_SERVER_PORT', 3000)

        sweeper = None if options['no_sweeper'] else RetentionSweeper()

        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=get_wsgi_application(),
        )
        server.server_name = 'UploadServer'

        self.stdout.write(
            self.style.SUCCESS(
                f'Upload server running at http://{host}:{port}',
            ),
        )

        try:
            if sweeper is not None:
                sweeper.start()
            logger.info('Upload server starting on %s:%d', host, port)
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down server...'))
        finally:
            server.stop()
            if sweeper is not None:
                sweeper.stop()
            self.stdout.write(self.style.SUCCESS('Upload server stopped'))

    def _run_with_reload(self, options: dict[str, Any]) -> None:
        """Serve from a child process restarted on source changes.

        Args:
            options: Command options, forwarded to the child.

        Raises:
            CommandError: If watchfiles is not installed.
        """
        try:
            from watchfiles import PythonFilter, run_process  # noqa: PLC0415
        except ImportError as exc:
            raise CommandError(
                '--reload needs the dev extra: pip install upload-server[dev]',
            ) from exc

        source_root = settings.BASE_DIR / 'server'
        self.stdout.write(
            self.style.SUCCESS(f'Reloading on changes under {source_root}'),
        )

        # Inherited by the child so it serves instead of watching
        os.environ[_RELOAD_ENV_VAR] = 'true'
        run_process(
            source_root,
            target=shlex.join(_child_argv(options)),
            target_type='command',
            watch_filter=PythonFilter(),
            callback=_log_reload,
        )


def _child_argv(options: dict[str, Any]) -> list[str]:
    """Build the command line that serves in the reload child.

    Args:
        options: Parent command options.

    Returns:
        Arguments for ``run_upload_server`` without ``--reload``.
    """
    argv = [
        sys.executable,
        '-m',
        'django',
        'run_upload_server',
        f'--settings={settings.SETTINGS_MODULE}',
    ]
    if options['host']:
        argv.append(f'--host={options["host"]}')
    if options['port']:
        argv.append(f'--port={options["port"]}')
    if options['no_sweeper']:
        argv.append('--no-sweeper')
    return argv


def _log_reload(changes: set[tuple[Any, str]]) -> None:
    logger.info(
        'Restarting upload server after changes to: %s',
        ', '.join(sorted({path for _, path in changes})),
    )
