"""
TaskComment Model - Comments and collaboration on tasks
"""

from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, Text, ForeignKey, func
from .base import Base


class TaskComment(Base):
    """
    Comments on tasks for collaboration and discussion.

    Features:
    - Multi-user commenting
    - Timestamps for created/updated
    - Author attribution, with the author name kept after the author is deleted
    """
    __tablename__ = "task_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Task relationship
    task_id: Mapped[int] = mapped_column(
        ForeignKey('tasks.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # Author information
    author_id: Mapped[int] = mapped_column(
        ForeignKey('users.id'),
        nullable=False,
        index=True
    )
    original_author_name: Mapped[Optional[str]] = mapped_column(String(120))

    # Comment content
    text: Mapped[str] = mapped_column(Text, nullable=False)
    is_edited: Mapped[bool] = mapped_column(default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f'<TaskComment task_id={self.task_id} author_id={self.author_id}>'

    def to_dict(self):
        """Convert comment to dictionary for JSON serialization"""
        return {
            'id': self.id,
            'task_id': self.task_id,
            'author_id': self.author_id,
            'original_author_name': self.original_author_name,
            'text': self.text,
            'is_edited': self.is_edited,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
