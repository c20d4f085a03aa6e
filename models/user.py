"""
User Model - Vazifa accounts
SQLAlchemy 2.0-safe model for accounts signing in by email or phone number.
"""

from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, Boolean, func
from .base import Base


class UserRole:
    """Global role constants, lowest privilege last."""
    TECH_ADMIN = 'tech_admin'
    SUPER_ADMIN = 'super_admin'
    ADMIN = 'admin'
    CHIEF_MANAGER = 'chief_manager'
    MANAGER = 'manager'
    MEMBER = 'member'

    ALL = (TECH_ADMIN, SUPER_ADMIN, ADMIN, CHIEF_MANAGER, MANAGER, MEMBER)


class User(Base):
    """
    Account record. Either email or phone number identifies the user;
    both are unique when present.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[Optional[str]] = mapped_column(String(120), unique=True, nullable=True, index=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(String(120))

    password_hash: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    auth_provider: Mapped[str] = mapped_column(String(16), default="local")  # local, google, apple
    role: Mapped[str] = mapped_column(String(32), default=UserRole.MEMBER, nullable=False)

    # Admin management fields
    disabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    disabled_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    disabled_reason: Mapped[Optional[str]] = mapped_column(String(255))

    # Retired verification flags, cleared by scripts/remove_verification_fields.py
    is_email_verified: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    is_phone_verified: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f'<User {self.id}: {self.email or self.phone_number}>'

    @property
    def display_identifier(self) -> str:
        return self.email or self.phone_number or str(self.id)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'phone_number': self.phone_number,
            'name': self.name,
            'role': self.role,
            'disabled': self.disabled,
            'disabled_reason': self.disabled_reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
