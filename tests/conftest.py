"""
Root pytest configuration and fixtures for maintenance job tests.

Each test gets its own app bound to a fresh in-memory SQLite database.
"""
import itertools
import os
import sqlite3
import sys
from pathlib import Path

import pytest
from sqlalchemy import event, select
from sqlalchemy.engine import Engine

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Test configuration
os.environ['FLASK_ENV'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys unless each connection turns them on."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture(scope='function')
def app():
    """Create a test Flask application with all tables created."""
    os.environ['DATABASE_URL'] = 'sqlite:///:memory:'

    from app import create_app
    from models import db

    test_app = create_app()
    test_app.config.update({'TESTING': True})

    with test_app.app_context():
        db.create_all()
        yield test_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def make_user(app):
    """Factory creating committed users. Returns the new user's id."""
    from models import db, User

    counter = itertools.count(1)

    def _make_user(name=None, email=None, phone=None, **kwargs):
        n = next(counter)
        user = User(name=name or f'Test User{n}', email=email, phone_number=phone, **kwargs)
        db.session.add(user)
        db.session.commit()
        return user.id

    return _make_user


@pytest.fixture(scope='function')
def make_task(app):
    """Factory creating a committed task with assignees and watchers. Returns the task id."""
    from models import db, Task, TaskAssignee, TaskWatcher

    counter = itertools.count(1)

    def _make_task(created_by_id, assignee_ids=(), watcher_ids=(), manager_id=None, title=None):
        task = Task(
            title=title or f'Task {next(counter)}',
            created_by_id=created_by_id,
            responsible_manager_id=manager_id,
        )
        db.session.add(task)
        db.session.flush()
        for user_id in assignee_ids:
            db.session.add(TaskAssignee(task_id=task.id, user_id=user_id))
        for user_id in watcher_ids:
            db.session.add(TaskWatcher(task_id=task.id, user_id=user_id))
        db.session.commit()
        return task.id

    return _make_task


@pytest.fixture(scope='function')
def make_workspace(app):
    """Factory creating a committed workspace with members. Returns the workspace id."""
    from models import db, Workspace, WorkspaceMember

    def _make_workspace(name, owner_id, member_ids=()):
        workspace = Workspace(name=name, owner_id=owner_id)
        db.session.add(workspace)
        db.session.flush()
        for user_id in member_ids:
            role = 'owner' if user_id == owner_id else 'member'
            db.session.add(WorkspaceMember(workspace_id=workspace.id, user_id=user_id, role=role))
        db.session.commit()
        return workspace.id

    return _make_workspace


@pytest.fixture(scope='function')
def fetch(app):
    """Re-read a row by primary key, bypassing stale identity-map state."""
    from models import db

    def _fetch(model, pk):
        db.session.expire_all()
        return db.session.execute(select(model).where(model.id == pk)).scalar_one_or_none()

    return _fetch


@pytest.fixture(scope='function')
def snapshot(app):
    """Return a function dumping every row of every table, for before/after comparison."""
    from models import db

    def _snapshot():
        db.session.expire_all()
        data = {}
        for table in db.metadata.sorted_tables:
            rows = db.session.execute(
                table.select().order_by(*table.primary_key.columns)
            ).mappings().all()
            data[table.name] = [dict(row) for row in rows]
        return data

    return _snapshot
