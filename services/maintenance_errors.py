"""
Error taxonomy for operator-run maintenance jobs.

Every failure a job can hit is raised as a ``MaintenanceError`` subclass so the
command-line entry points can print a one-line diagnostic and exit non-zero.
Store failures are translated from SQLAlchemy exceptions by ``store_errors``.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    INVALID_TARGET = "invalid_target"
    DATABASE = "database"
    DUPLICATE_KEY = "duplicate_key"


class MaintenanceError(Exception):
    """Base exception for maintenance job errors."""
    category = ErrorCategory.DATABASE

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error': type(self).__name__,
            'message': self.message,
            'category': self.category.value,
            'context': self.context,
            'timestamp': self.timestamp.isoformat()
        }


class ConfigurationError(MaintenanceError):
    """Required configuration (e.g. DATABASE_URL) is missing."""
    category = ErrorCategory.CONFIGURATION


class NotFoundError(MaintenanceError):
    """No account matches the given identifier."""
    category = ErrorCategory.NOT_FOUND


class InvalidTargetError(MaintenanceError):
    """The resolved account must not be the subject of this operation."""
    category = ErrorCategory.INVALID_TARGET


class StoreError(MaintenanceError):
    """Failure while talking to the database."""
    category = ErrorCategory.DATABASE


class DuplicateKeyError(StoreError):
    """A unique constraint rejected an insert or update."""
    category = ErrorCategory.DUPLICATE_KEY


def _is_unique_violation(error: IntegrityError) -> bool:
    orig = getattr(error, 'orig', None)
    # psycopg2 exposes the SQLSTATE; SQLite only has the message
    if getattr(orig, 'pgcode', None) == '23505':
        return True
    return orig is not None and str(orig).startswith("UNIQUE constraint failed")


@contextmanager
def store_errors(operation: str):
    """
    Translate SQLAlchemy failures inside the block into ``StoreError``.

    The session is rolled back before the translated error is raised so the
    caller can keep using it. Unique constraint violations become
    ``DuplicateKeyError``; ``MaintenanceError``s pass through untouched.
    """
    try:
        yield
    except MaintenanceError:
        raise
    except IntegrityError as e:
        db.session.rollback()
        if _is_unique_violation(e):
            raise DuplicateKeyError(
                f"{operation}: duplicate key",
                context={'operation': operation, 'detail': str(e.orig)[:200]}
            ) from e
        logger.error(f"[STORE] {operation} failed: {e}")
        raise StoreError(f"{operation} failed: {e.orig}", context={'operation': operation}) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[STORE] {operation} failed: {e}")
        raise StoreError(f"{operation} failed: {e}", context={'operation': operation}) from e
