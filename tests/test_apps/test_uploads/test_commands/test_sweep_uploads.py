"""Tests for sweep_uploads management command."""

import logging
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command


@pytest.mark.usefixtures('configured_storage')
class TestSweepUploadsCommand:
    """Tests for sweep_uploads management command."""

    def test_sweep_deletes_old_files(self, stored_file_factory):
        """Test files older than 24 hours are deleted."""
        old_file = stored_file_factory('image_1_1.png', age=timedelta(hours=25))
        recent = stored_file_factory('image_2_2.png', age=timedelta(hours=1))

        out = StringIO()
        call_command('sweep_uploads', stdout=out)

        assert not old_file.exists()
        assert recent.exists()
        assert 'Deleted 1 files, 1 retained, 0 failed' in out.getvalue()

    def test_sweep_dry_run(self, stored_file_factory):
        """Test dry run lists files without deleting."""
        old_file = stored_file_factory('video_1_1.mp4', age=timedelta(days=2))

        out = StringIO()
        call_command('sweep_uploads', '--dry-run', stdout=out)

        assert old_file.exists()
        output = out.getvalue()
        assert 'Would delete: video_1_1.mp4' in output
        assert 'Would delete 1 files' in output

    def test_sweep_max_age_override(self, stored_file_factory):
        """Test the maximum age can be overridden in hours."""
        old_file = stored_file_factory('image_1_1.png', age=timedelta(hours=3))

        out = StringIO()
        call_command('sweep_uploads', '--max-age-hours', '2', stdout=out)

        assert not old_file.exists()
        assert 'older than 2:00:00' in out.getvalue()

    def test_sweep_empty_storage(self):
        """Test a missing storage root deletes nothing."""
        out = StringIO()
        call_command('sweep_uploads', stdout=out)

        assert 'Deleted 0 files' in out.getvalue()

    def test_sweep_reports_failures(
        self,
        configured_storage,
        stored_file_factory,
        monkeypatch,
        caplog,
    ):
        """Test a file that cannot be deleted is reported."""
        stored_file_factory('image_1_1.png', age=timedelta(hours=25))

        def failing_delete(name):  # noqa: WPS430
            raise PermissionError('denied')

        monkeypatch.setattr(configured_storage, 'delete', failing_delete)
        monkeypatch.setattr(logging.getLogger('server'), 'propagate', True)
        caplog.set_level(logging.WARNING, logger='server')

        out = StringIO()
        err = StringIO()
        call_command('sweep_uploads', stdout=out, stderr=err)

        assert 'Failed to sweep image_1_1.png: denied' in err.getvalue()
        assert '1 failed' in out.getvalue()
        assert 'Manual sweep could not remove image_1_1.png' in caplog.text

    def test_sweep_unreadable_root(self, configured_storage, monkeypatch):
        """Test a listing failure becomes a command error."""
        def failing_list():  # noqa: WPS430
            raise PermissionError('denied')

        monkeypatch.setattr(configured_storage, 'list_files', failing_list)

        with pytest.raises(CommandError, match='Cannot list storage root'):
            call_command('sweep_uploads', stdout=StringIO())
