"""Tests for run_upload_server management command."""

from io import StringIO

import pytest
from django.core.management import call_command

from server.apps.uploads.management.commands import run_upload_server


class _FakeServer:
    """WSGI server stand-in that is interrupted as soon as it starts."""

    instances: list['_FakeServer'] = []  # noqa: RUF012

    def __init__(self, bind_addr, wsgi_app):
        self.bind_addr = bind_addr
        self.wsgi_app = wsgi_app
        self.server_name = None
        self.stopped = False
        self.instances.append(self)

    def start(self):
        raise KeyboardInterrupt

    def stop(self):
        self.stopped = True


class _FakeSweeper:
    """Retention sweeper stand-in recording its lifecycle."""

    instances: list['_FakeSweeper'] = []  # noqa: RUF012

    def __init__(self):
        self.calls = []
        self.instances.append(self)

    def start(self):
        self.calls.append('start')

    def stop(self):
        self.calls.append('stop')


@pytest.fixture
def fake_runtime(monkeypatch):
    """Replace cheroot and the sweeper with fakes."""
    _FakeServer.instances = []
    _FakeSweeper.instances = []
    monkeypatch.setattr(run_upload_server, 'WSGIServer', _FakeServer)
    monkeypatch.setattr(run_upload_server, 'RetentionSweeper', _FakeSweeper)
    monkeypatch.delenv('UPLOAD_SERVER_RELOAD_SUBPROCESS', raising=False)


@pytest.mark.usefixtures('fake_runtime')
class TestRunUploadServerCommand:
    """Tests for run_upload_server management command."""

    def test_runs_server_and_sweeper(self):
        """Test the server binds, the sweeper runs, and both stop."""
        out = StringIO()
        call_command(
            'run_upload_server',
            '--host',
            '127.0.0.1',
            '--port',
            '8123',
            stdout=out,
        )

        server = _FakeServer.instances[0]
        assert server.bind_addr == ('127.0.0.1', 8123)
        assert server.server_name == 'UploadServer'
        assert server.stopped
        assert _FakeSweeper.instances[0].calls == ['start', 'stop']
        output = out.getvalue()
        assert 'Upload server running at http://127.0.0.1:8123' in output
        assert 'Upload server stopped' in output

    def test_defaults_from_settings(self, settings):
        """Test host and port default to settings."""
        settings.UPLOAD_SERVER_HOST = '0.0.0.0'  # noqa: S104
        settings.UPLOAD_SERVER_PORT = 3000

        call_command('run_upload_server', stdout=StringIO())

        assert _FakeServer.instances[0].bind_addr == ('0.0.0.0', 3000)  # noqa: S104

    def test_no_sweeper(self):
        """Test --no-sweeper serves without scheduling sweeps."""
        call_command('run_upload_server', '--no-sweeper', stdout=StringIO())

        assert _FakeServer.instances[0].stopped
        assert not _FakeSweeper.instances


class TestRunUploadServerReload:
    """Tests for the --reload watcher process."""

    def test_reload_watches_sources(self, settings, monkeypatch):
        """Test --reload serves from a child restarted by watchfiles."""
        watchfiles = pytest.importorskip('watchfiles')
        calls = []

        def fake_run_process(path, **kwargs):  # noqa: WPS430
            calls.append((path, kwargs))

        monkeypatch.setattr(watchfiles, 'run_process', fake_run_process)
        monkeypatch.setenv('UPLOAD_SERVER_RELOAD_SUBPROCESS', '')

        call_command(
            'run_upload_server',
            '--reload',
            '--port',
            '8123',
            '--no-sweeper',
            stdout=StringIO(),
        )

        path, kwargs = calls[0]
        assert path == settings.BASE_DIR / 'server'
        assert kwargs['target_type'] == 'command'
        assert 'run_upload_server' in kwargs['target']
        assert '--port=8123' in kwargs['target']
        assert '--no-sweeper' in kwargs['target']
        assert '--reload' not in kwargs['target']

    @pytest.mark.usefixtures('fake_runtime')
    def test_reload_child_serves(self, monkeypatch):
        """Test the reload child runs the server instead of watching."""
        monkeypatch.setenv('UPLOAD_SERVER_RELOAD_SUBPROCESS', 'true')

        call_command('run_upload_server', '--reload', stdout=StringIO())

        assert _FakeServer.instances[0].stopped
