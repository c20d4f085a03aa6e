"""
Task Model for workspace task management
SQLAlchemy 2.0-safe model for tasks with creator, assignees, watchers and a responsible manager.
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime, date
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, DateTime, Date, Text, Boolean, ForeignKey, func, Index
from .base import Base

# Forward reference for type checking
if TYPE_CHECKING:
    from .user import User


class TaskAssignee(Base):
    """
    Junction table for many-to-many relationship between tasks and assigned users.
    """
    __tablename__ = "task_assignees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # One row per (task, user): removing a user touches at most one row per task
    __table_args__ = (
        Index('ix_task_assignees_composite', 'task_id', 'user_id', unique=True),
    )

    def __repr__(self):
        return f'<TaskAssignee task_id={self.task_id} user_id={self.user_id}>'


class TaskWatcher(Base):
    """Junction table for users watching a task."""
    __tablename__ = "task_watchers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index('ix_task_watchers_composite', 'task_id', 'user_id', unique=True),
    )

    def __repr__(self):
        return f'<TaskWatcher task_id={self.task_id} user_id={self.user_id}>'


class Task(Base):
    """
    Task within a workspace. Always has a creator; assignees, watchers and
    the responsible manager are optional.
    """
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Task content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(32), default="To Do")  # To Do, In Progress, Review, Done
    priority: Mapped[str] = mapped_column(String(16), default="Medium")  # Low, Medium, High

    due_date: Mapped[Optional[date]] = mapped_column(Date)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)

    workspace_id: Mapped[Optional[int]] = mapped_column(ForeignKey("workspaces.id"), nullable=True, index=True)

    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_id])

    responsible_manager_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    responsible_manager: Mapped[Optional["User"]] = relationship(foreign_keys=[responsible_manager_id])

    assignees: Mapped[list["User"]] = relationship(
        secondary="task_assignees",
        primaryjoin="Task.id==TaskAssignee.task_id",
        secondaryjoin="User.id==TaskAssignee.user_id",
        lazy="selectin",
        viewonly=True,
    )
    watchers: Mapped[list["User"]] = relationship(
        secondary="task_watchers",
        primaryjoin="Task.id==TaskWatcher.task_id",
        secondaryjoin="User.id==TaskWatcher.user_id",
        lazy="selectin",
        viewonly=True,
    )

    # Identity of a deleted creator, kept for history
    original_creator_name: Mapped[Optional[str]] = mapped_column(String(120))
    original_creator_email: Mapped[Optional[str]] = mapped_column(String(120))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('ix_tasks_created_by', 'created_by_id'),
        Index('ix_tasks_responsible_manager', 'responsible_manager_id'),
    )

    def __repr__(self):
        return f'<Task {self.id}: {self.title}>'

    @property
    def is_completed(self) -> bool:
        return self.status == "Done"

    @property
    def creator_display_name(self) -> Optional[str]:
        """Name shown for the creator, preferring the preserved name of a deleted user."""
        if self.original_creator_name:
            return self.original_creator_name
        return self.created_by.name if self.created_by else None
