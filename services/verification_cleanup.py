"""
Verification Cleanup - removes the retired email/phone verification system.

Clears the per-user verification flags and drops the verification tables.
Safe to run repeatedly: tables that are already gone are reported, not failed on.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import select, update, func, or_, inspect

from models import db, User, Verification, PhoneVerification
from services.maintenance_errors import store_errors

logger = logging.getLogger(__name__)

RETIRED_TABLES = (Verification.__table__, PhoneVerification.__table__)


@dataclass
class VerificationCleanupResult:
    users_matched: int = 0
    users_modified: int = 0
    dropped_tables: List[str] = field(default_factory=list)
    missing_tables: List[str] = field(default_factory=list)


def clear_user_verification_flags() -> tuple:
    """Null out is_email_verified/is_phone_verified. Returns (matched, modified)."""
    with store_errors("count users"):
        matched = db.session.execute(select(func.count(User.id))).scalar() or 0

    stmt = (
        update(User)
        .where(or_(User.is_email_verified.isnot(None), User.is_phone_verified.isnot(None)))
        .values(is_email_verified=None, is_phone_verified=None)
        .execution_options(synchronize_session=False)
    )
    with store_errors("clear verification flags"):
        result = db.session.execute(stmt)
        db.session.commit()

    return matched, result.rowcount or 0


def drop_retired_tables(result: VerificationCleanupResult) -> None:
    engine = db.engine
    for table in RETIRED_TABLES:
        with store_errors(f"drop {table.name}"):
            if not inspect(engine).has_table(table.name):
                logger.info(f"[VERIFICATION_CLEANUP] {table.name} does not exist (already dropped)")
                result.missing_tables.append(table.name)
                continue
            table.drop(bind=engine)
        logger.info(f"[VERIFICATION_CLEANUP] Dropped {table.name}")
        result.dropped_tables.append(table.name)


def remove_verification_fields() -> VerificationCleanupResult:
    """Run the whole cleanup and return what it did."""
    result = VerificationCleanupResult()

    result.users_matched, result.users_modified = clear_user_verification_flags()
    logger.info(
        f"[VERIFICATION_CLEANUP] Cleared flags on {result.users_modified} "
        f"of {result.users_matched} users"
    )

    # Release the session's connection before DDL
    db.session.close()
    drop_retired_tables(result)
    return result
