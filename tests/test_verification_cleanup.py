"""Tests for services/verification_cleanup.py and its script"""

from datetime import datetime, timedelta

from sqlalchemy import inspect, select

from models import db, User, PhoneVerification
from scripts import remove_verification_fields as script
from services.verification_cleanup import remove_verification_fields


def _table_names():
    return set(inspect(db.engine).get_table_names())


class TestRemoveVerificationFields:

    def test_clears_flags_and_drops_tables(self, app, make_user, fetch):
        verified = make_user(email='a@x.com', is_email_verified=True, is_phone_verified=False)
        plain = make_user(email='b@x.com')
        db.session.add(PhoneVerification(
            phone_number='+992901234567',
            code='123456',
            expires_at=datetime.now() + timedelta(minutes=5),
        ))
        db.session.commit()

        result = remove_verification_fields()

        assert result.users_matched == 2
        assert result.users_modified == 1
        assert sorted(result.dropped_tables) == ['phone_verifications', 'verifications']
        assert result.missing_tables == []

        user = fetch(User, verified)
        assert user.is_email_verified is None
        assert user.is_phone_verified is None
        assert fetch(User, plain) is not None
        assert 'verifications' not in _table_names()
        assert 'phone_verifications' not in _table_names()

    def test_second_run_reports_missing_tables(self, app, make_user):
        make_user(email='a@x.com', is_email_verified=True)
        remove_verification_fields()

        result = remove_verification_fields()

        assert result.users_modified == 0
        assert result.dropped_tables == []
        assert sorted(result.missing_tables) == ['phone_verifications', 'verifications']

    def test_users_table_kept(self, app, make_user):
        make_user(email='a@x.com', is_phone_verified=True)

        remove_verification_fields()

        assert db.session.execute(select(User.email)).scalars().all() == ['a@x.com']


class TestRemoveVerificationFieldsScript:

    def test_script_succeeds(self, app, capsys):
        assert script.main(app=app) == 0

        out = capsys.readouterr().out
        assert 'verifications table dropped' in out
        assert 'Migration completed successfully!' in out

    def test_script_unexpected_error_is_one_line(self, app, monkeypatch, capsys):
        def broken():
            raise RuntimeError('disk full')

        monkeypatch.setattr(script, 'remove_verification_fields', broken)

        assert script.main(app=app) == 1

        captured = capsys.readouterr()
        assert 'Migration failed: disk full' in captured.out
        assert 'Traceback' not in captured.out + captured.err

    def test_script_without_database_url(self, monkeypatch, capsys):
        monkeypatch.delenv('DATABASE_URL', raising=False)

        assert script.main() == 1
        assert 'Migration failed' in capsys.readouterr().out
