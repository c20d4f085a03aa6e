"""Tests for scripts/delete_user_preserve_data.py"""

import pytest
from sqlalchemy import select

from models import db, Task, User
from scripts import delete_user_preserve_data as cli
from services import user_deletion_service as svc
from services.maintenance_errors import StoreError


@pytest.fixture
def alice(make_user, make_task):
    user_id = make_user(name='Alice', email='a@x.com')
    make_task(user_id)
    return user_id


class TestDeleteUserScript:

    def test_missing_argument_prints_usage(self, capsys):
        assert cli.main([]) == 1
        assert 'Usage:' in capsys.readouterr().out

    def test_missing_database_url_is_configuration_error(self, monkeypatch, capsys):
        monkeypatch.delenv('DATABASE_URL', raising=False)

        assert cli.main(['a@x.com']) == 1
        assert 'Configuration error' in capsys.readouterr().out

    def test_success_prints_every_count(self, app, alice, fetch, capsys):
        assert cli.main(['a@x.com'], app=app) == 0

        out = capsys.readouterr().out
        assert 'Created tasks reassigned: 1' in out
        assert 'Removed from task watchers' in out
        for _, label in cli.SUMMARY_FIELDS:
            assert label in out
        assert 'Orphaned workspaces: 0' in out
        assert fetch(User, alice) is None

    def test_not_found_exits_1(self, app, alice, snapshot, capsys):
        before = snapshot()

        assert cli.main(['nobody@x.com'], app=app) == 1

        assert 'User not found' in capsys.readouterr().out
        assert snapshot() == before

    def test_sentinel_target_exits_1(self, app, capsys):
        svc.get_or_create_sentinel_user()

        assert cli.main([svc.DELETED_USER_EMAIL], app=app) == 1
        assert 'cannot be deleted' in capsys.readouterr().out

    def test_store_error_exits_1_without_traceback(self, app, alice, monkeypatch, capsys):
        def failing_pass(*args):
            raise StoreError('reassign comment authors failed: connection lost')

        monkeypatch.setattr(svc, 'reassign_comment_authors', failing_pass)

        assert cli.main(['a@x.com'], app=app) == 1

        captured = capsys.readouterr()
        assert 'connection lost' in captured.out
        assert 'Traceback' not in captured.out + captured.err

    def test_orphaned_workspaces_printed_as_warning(self, app, alice, make_workspace, capsys):
        make_workspace('Alice HQ', alice, member_ids=[alice])

        assert cli.main(['a@x.com'], app=app) == 0

        out = capsys.readouterr().out
        assert 'WARNING' in out
        assert 'Alice HQ' in out
        assert 'Orphaned workspaces: 1' in out

    def test_dry_run_changes_nothing(self, app, alice, snapshot, capsys):
        before = snapshot()

        assert cli.main(['a@x.com', '--dry-run'], app=app) == 0

        assert '[DRY RUN]' in capsys.readouterr().out
        assert snapshot() == before

    def test_task_survives_deletion(self, app, alice, fetch):
        task_id = db.session.execute(select(Task.id).where(Task.created_by_id == alice)).scalar_one()

        cli.main(['a@x.com'], app=app)

        task = fetch(Task, task_id)
        assert task is not None
        assert task.original_creator_email == 'a@x.com'
