"""
ActivityLog Model - append-only history of user actions on tasks, projects and workspaces
"""

from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, ForeignKey, func, Index
from .base import Base, JSONBCompatible


class ActivityLog(Base):
    """
    One recorded action. ``details`` is a free-form JSON object; when the
    acting user is deleted it carries ``originalUserName``/``originalUserEmail``.
    """
    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    action: Mapped[str] = mapped_column(String(64), nullable=False)  # created_task, updated_task, added_comment, ...
    resource_type: Mapped[str] = mapped_column(String(32), nullable=False)  # Task, Project, Workspace, User
    resource_id: Mapped[Optional[int]] = mapped_column(Integer)
    details: Mapped[dict] = mapped_column(JSONBCompatible, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('ix_activity_logs_resource', 'resource_type', 'resource_id'),
    )

    def __repr__(self):
        return f'<ActivityLog {self.action} user_id={self.user_id}>'
