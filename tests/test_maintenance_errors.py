"""Tests for services/maintenance_errors.py"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from models import db, Task
from services.maintenance_errors import (
    DuplicateKeyError,
    MaintenanceError,
    NotFoundError,
    StoreError,
    store_errors,
)


class TestStoreErrors:

    def test_unique_violation_becomes_duplicate_key(self, app):
        with pytest.raises(DuplicateKeyError) as exc_info:
            with store_errors('create user'):
                raise IntegrityError('INSERT', {}, Exception('UNIQUE constraint failed: users.email'))

        assert isinstance(exc_info.value, StoreError)
        assert exc_info.value.context['operation'] == 'create user'

    def test_other_integrity_error_is_store_error(self, app):
        with pytest.raises(StoreError) as exc_info:
            with store_errors('create task'):
                raise IntegrityError('INSERT', {}, Exception('NOT NULL constraint failed: tasks.created_by_id'))

        assert not isinstance(exc_info.value, DuplicateKeyError)

    def test_constraint_named_unique_is_not_duplicate_key(self, app):
        with pytest.raises(StoreError) as exc_info:
            with store_errors('update workspace'):
                raise IntegrityError('UPDATE', {}, Exception('CHECK constraint failed: ck_unique_slug_format'))

        assert not isinstance(exc_info.value, DuplicateKeyError)

    def test_postgres_unique_violation_by_sqlstate(self, app):
        class UniqueViolation(Exception):
            pgcode = '23505'

        with pytest.raises(DuplicateKeyError):
            with store_errors('create user'):
                raise IntegrityError('INSERT', {}, UniqueViolation('duplicate key value violates "users_email_key"'))

    def test_foreign_key_violation_is_store_error(self, app):
        with pytest.raises(StoreError) as exc_info:
            with store_errors('create task'):
                db.session.add(Task(title='Orphan', created_by_id=9999))
                db.session.commit()

        assert not isinstance(exc_info.value, DuplicateKeyError)
        assert 'FOREIGN KEY' in exc_info.value.message

    def test_operational_error_is_store_error(self, app):
        with pytest.raises(StoreError):
            with store_errors('update tasks'):
                raise OperationalError('UPDATE', {}, Exception('server closed the connection'))

    def test_maintenance_errors_pass_through(self, app):
        with pytest.raises(NotFoundError):
            with store_errors('resolve user'):
                raise NotFoundError('User not found: x')

    def test_unrelated_exceptions_not_wrapped(self, app):
        with pytest.raises(ValueError):
            with store_errors('resolve user'):
                raise ValueError('boom')

    def test_to_dict(self):
        error = MaintenanceError('boom', context={'k': 'v'})
        data = error.to_dict()

        assert data['error'] == 'MaintenanceError'
        assert data['message'] == 'boom'
        assert data['context'] == {'k': 'v'}
