"""
Workspace Model - top-level container for projects with an owner and members
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, DateTime, Text, Boolean, ForeignKey, func, Index
from .base import Base

if TYPE_CHECKING:
    from .user import User


class WorkspaceMember(Base):
    """Membership of a user in a workspace with a workspace-level role."""
    __tablename__ = "workspace_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workspace_id: Mapped[int] = mapped_column(ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(16), default="member")  # owner, admin, member, viewer
    joined_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index('ix_workspace_members_composite', 'workspace_id', 'user_id', unique=True),
    )

    def __repr__(self):
        return f'<WorkspaceMember workspace_id={self.workspace_id} user_id={self.user_id} ({self.role})>'


class Workspace(Base):
    """
    Workspace owned by exactly one user. Ownership is never transferred
    automatically.
    """
    __tablename__ = "workspaces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    color: Mapped[str] = mapped_column(String(16), default="#3b82f6")

    # No FK constraint: a deleted owner leaves its former id in place
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    owner: Mapped[Optional["User"]] = relationship(
        primaryjoin="foreign(Workspace.owner_id) == User.id",
        viewonly=True,
    )

    members: Mapped[list["WorkspaceMember"]] = relationship(
        primaryjoin="Workspace.id==WorkspaceMember.workspace_id",
        lazy="selectin",
        viewonly=True,
    )

    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f'<Workspace {self.id}: {self.name}>'

    @property
    def member_ids(self) -> list:
        return [m.user_id for m in self.members]
