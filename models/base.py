"""
Declarative base and shared column types for all Vazifa models.
SQLAlchemy 2.0-style declarative base registered with Flask-SQLAlchemy.
"""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import JSON, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB as PostgresJSONB
from sqlalchemy.orm import DeclarativeBase


class _DeclarativeBase(DeclarativeBase):
    pass


db = SQLAlchemy(model_class=_DeclarativeBase)
Base = db.Model


class JSONBCompatible(TypeDecorator):
    """
    A JSONB type that falls back to JSON for non-PostgreSQL databases (e.g., SQLite in tests).
    This allows tests to run with SQLite while production uses PostgreSQL JSONB.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PostgresJSONB())
        return dialect.type_descriptor(JSON())
