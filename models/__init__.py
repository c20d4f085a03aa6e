"""
Vazifa models.
Import models from here so every table is registered on ``db.metadata``.
"""

from .base import db, Base, JSONBCompatible
from .user import User, UserRole
from .workspace import Workspace, WorkspaceMember
from .task import Task, TaskAssignee, TaskWatcher
from .task_comment import TaskComment
from .task_response import TaskResponse
from .activity_log import ActivityLog
from .verification import Verification, PhoneVerification

__all__ = [
    'db',
    'Base',
    'JSONBCompatible',
    'User',
    'UserRole',
    'Workspace',
    'WorkspaceMember',
    'Task',
    'TaskAssignee',
    'TaskWatcher',
    'TaskComment',
    'TaskResponse',
    'ActivityLog',
    'Verification',
    'PhoneVerification',
]
