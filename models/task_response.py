"""
TaskResponse Model - a participant's response to a task
"""

from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, Text, Boolean, ForeignKey, JSON, func
from .base import Base


class TaskResponse(Base):
    """Response submitted by a task participant, optionally with attachments."""
    __tablename__ = "task_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True)

    author_id: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    original_author_name: Mapped[Optional[str]] = mapped_column(String(120))

    text: Mapped[Optional[str]] = mapped_column(Text)
    attachments: Mapped[Optional[list]] = mapped_column(JSON)  # [{file_name, file_url, file_type, file_size}]
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f'<TaskResponse task_id={self.task_id} author_id={self.author_id}>'
