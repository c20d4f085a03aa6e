#!/usr/bin/env python3
"""
Migration script: remove the verification system.

1. Clears is_email_verified / is_phone_verified on every user
2. Drops the verifications table
3. Drops the phone_verifications table

Usage:
    python scripts/remove_verification_fields.py
"""

import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db
from services.maintenance_errors import ConfigurationError, MaintenanceError
from services.verification_cleanup import remove_verification_fields

logging.basicConfig(level=logging.INFO)


def main(argv=None, app=None) -> int:
    print("=" * 60)
    print("Starting Migration: Remove Verification Fields")
    print("=" * 60)

    try:
        if app is None:
            app = create_app()
    except ConfigurationError as e:
        print(f"\nMigration failed: {e.message}")
        return 1

    with app.app_context():
        try:
            result = remove_verification_fields()
        except MaintenanceError as e:
            print(f"\nMigration failed: {e.message}")
            return 1
        except Exception as e:
            print(f"\nMigration failed: {e}")
            return 1
        finally:
            db.session.remove()

    print(f"\n   Matched {result.users_matched} user records")
    print(f"   Modified {result.users_modified} user records")
    for name in result.dropped_tables:
        print(f"   {name} table dropped")
    for name in result.missing_tables:
        print(f"   {name} table does not exist (already dropped or never created)")

    print("\n" + "=" * 60)
    print("Migration completed successfully!")
    print("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
