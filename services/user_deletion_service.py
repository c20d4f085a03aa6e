"""
User Deletion Service - delete an account without losing the data it owns

Removes one user from the system while keeping every task, comment, response
and activity record they touched:

1. Resolve the target by email, phone number or id (single query)
2. Get or create the "[Deleted user]" sentinel account
3. Reassign authored records to the sentinel, keeping the original name/email
4. Strip the user from assignee, watcher and workspace member sets
5. Report workspaces the user still owns (never auto-transferred)
6. Delete the user row, last

Every pass is one bulk UPDATE/DELETE committed on its own. A pass's predicate
no longer matches once applied, so an interrupted run is finished by running
it again.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any, Callable

from sqlalchemy import select, update, delete, func, or_, case, cast, literal_column, Text
from sqlalchemy.dialects.postgresql import JSONB

from models import (
    db,
    User,
    UserRole,
    Task,
    TaskAssignee,
    TaskWatcher,
    TaskComment,
    TaskResponse,
    ActivityLog,
    Workspace,
    WorkspaceMember,
)
from services.maintenance_errors import (
    DuplicateKeyError,
    InvalidTargetError,
    NotFoundError,
    StoreError,
    store_errors,
)

logger = logging.getLogger(__name__)

DELETED_USER_NAME = "[Deleted user]"
DELETED_USER_EMAIL = "deleted@system.local"
DELETED_USER_REASON = "System account holding data of deleted users"

# Largest value a BIGINT primary key can hold
_MAX_USER_ID = 2 ** 63 - 1

ProgressCallback = Callable[[str, Optional[int]], None]


@dataclass
class OrphanedWorkspace:
    """A workspace still owned by the deleted user."""
    id: int
    name: str


@dataclass
class UserDeletionSummary:
    """Counts of records touched by one deletion run."""
    user_id: int
    user_name: str
    user_email: Optional[str]
    sentinel_id: int
    tasks_created: int = 0
    tasks_assigned: int = 0
    manager_tasks: int = 0
    comments: int = 0
    responses: int = 0
    activities: int = 0
    workspaces: int = 0
    orphaned_workspaces: List[OrphanedWorkspace] = field(default_factory=list)

    @property
    def orphaned_workspace_count(self) -> int:
        return len(self.orphaned_workspaces)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['orphaned_workspace_count'] = self.orphaned_workspace_count
        return data


@dataclass
class UserDeletionPreview:
    """Counts of records a deletion run would touch; nothing is modified."""
    user_id: int
    user_name: str
    user_email: Optional[str]
    user_phone: Optional[str]
    tasks_created: int = 0
    tasks_assigned: int = 0
    manager_tasks: int = 0
    watched_tasks: int = 0
    comments: int = 0
    responses: int = 0
    activities: int = 0
    workspaces: int = 0
    orphaned_workspaces: List[OrphanedWorkspace] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================================
# Identity resolution
# ============================================================

def is_valid_user_id(identifier: str) -> bool:
    """True when the identifier can be a users.id primary key value."""
    return identifier.isdigit() and 0 < int(identifier) <= _MAX_USER_ID


def resolve_target_user(identifier: str) -> User:
    """
    Find the user matching ``identifier`` by email, phone number or id.

    All candidates are matched by one query; when several rows match, an
    email match wins over a phone match, which wins over an id match.

    Raises:
        NotFoundError: nothing matches
        InvalidTargetError: the match is the sentinel account
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise NotFoundError("Empty user identifier", context={'identifier': identifier})

    email = identifier.lower()
    clauses = [User.email == email, User.phone_number == identifier]
    if is_valid_user_id(identifier):
        clauses.append(User.id == int(identifier))

    stmt = (
        select(User)
        .where(or_(*clauses))
        .order_by(case((User.email == email, 0), (User.phone_number == identifier, 1), else_=2))
        .limit(1)
    )

    with store_errors("resolve user"):
        user = db.session.execute(stmt).scalars().first()

    if user is None:
        raise NotFoundError(f"User not found: {identifier}", context={'identifier': identifier})

    if user.email == DELETED_USER_EMAIL:
        raise InvalidTargetError(
            "The deleted-user system account cannot be deleted",
            context={'identifier': identifier, 'user_id': user.id}
        )

    return user


# ============================================================
# Sentinel account
# ============================================================

def _find_sentinel_user() -> Optional[User]:
    with store_errors("look up sentinel user"):
        return db.session.execute(
            select(User).where(User.email == DELETED_USER_EMAIL)
        ).scalars().first()


def get_or_create_sentinel_user() -> User:
    """
    Return the "[Deleted user]" account, creating it on first use.

    If another run creates it between our lookup and insert, the unique email
    index rejects our row and the winner's row is returned instead.
    """
    sentinel = _find_sentinel_user()
    if sentinel is not None:
        return sentinel

    try:
        with store_errors("create sentinel user"):
            sentinel = User(
                email=DELETED_USER_EMAIL,
                name=DELETED_USER_NAME,
                role=UserRole.MEMBER,
                disabled=True,
                disabled_at=func.now(),
                disabled_reason=DELETED_USER_REASON,
                auth_provider="local",
                password_hash=None,
            )
            db.session.add(sentinel)
            db.session.commit()
    except DuplicateKeyError:
        logger.info("[USER_DELETION] Sentinel user created concurrently, re-reading it")
        sentinel = _find_sentinel_user()
        if sentinel is None:
            raise StoreError("Sentinel user missing after duplicate-key conflict")
        return sentinel

    logger.info(f"[USER_DELETION] Created sentinel user id={sentinel.id}")
    return sentinel


# ============================================================
# Reassignment passes
# ============================================================

def _run_bulk(operation: str, stmt) -> int:
    """Execute one bulk statement in its own transaction and return the row count."""
    with store_errors(operation):
        result = db.session.execute(stmt.execution_options(synchronize_session=False))
        db.session.commit()
    count = result.rowcount or 0
    logger.debug(f"[USER_DELETION] {operation}: {count} rows")
    return count


def reassign_created_tasks(target_id: int, sentinel_id: int,
                           original_name: str, original_email: Optional[str]) -> int:
    stmt = (
        update(Task)
        .where(Task.created_by_id == target_id)
        .values(
            created_by_id=sentinel_id,
            original_creator_name=original_name,
            original_creator_email=original_email,
        )
    )
    return _run_bulk("reassign created tasks", stmt)


def remove_from_task_assignees(target_id: int) -> int:
    return _run_bulk(
        "remove from task assignees",
        delete(TaskAssignee).where(TaskAssignee.user_id == target_id)
    )


def clear_responsible_manager(target_id: int) -> int:
    stmt = (
        update(Task)
        .where(Task.responsible_manager_id == target_id)
        .values(responsible_manager_id=None)
    )
    return _run_bulk("clear responsible manager", stmt)


def remove_from_task_watchers(target_id: int) -> int:
    return _run_bulk(
        "remove from task watchers",
        delete(TaskWatcher).where(TaskWatcher.user_id == target_id)
    )


def reassign_comment_authors(target_id: int, sentinel_id: int, original_name: str) -> int:
    stmt = (
        update(TaskComment)
        .where(TaskComment.author_id == target_id)
        .values(author_id=sentinel_id, original_author_name=original_name)
    )
    return _run_bulk("reassign comment authors", stmt)


def reassign_response_authors(target_id: int, sentinel_id: int, original_name: str) -> int:
    stmt = (
        update(TaskResponse)
        .where(TaskResponse.author_id == target_id)
        .values(author_id=sentinel_id, original_author_name=original_name)
    )
    return _run_bulk("reassign response authors", stmt)


def _details_with_original_user(original_name: str, original_email: Optional[str]):
    """SQL expression merging the original user keys into ActivityLog.details."""
    dialect = db.session.get_bind().dialect.name
    if dialect == 'postgresql':
        patch = func.jsonb_build_object(
            'originalUserName', cast(original_name, Text),
            'originalUserEmail', cast(original_email, Text),
        )
        current = func.coalesce(cast(ActivityLog.details, JSONB), literal_column("'{}'::jsonb"))
        return current.op('||')(patch)

    current = func.coalesce(ActivityLog.details, literal_column("'{}'"))
    return func.json_set(
        current,
        '$.originalUserName', original_name,
        '$.originalUserEmail', original_email,
    )


def reassign_activity_logs(target_id: int, sentinel_id: int,
                           original_name: str, original_email: Optional[str]) -> int:
    stmt = (
        update(ActivityLog)
        .where(ActivityLog.user_id == target_id)
        .values(
            user_id=sentinel_id,
            details=_details_with_original_user(original_name, original_email),
        )
    )
    return _run_bulk("reassign activity logs", stmt)


def remove_workspace_memberships(target_id: int) -> int:
    return _run_bulk(
        "remove workspace memberships",
        delete(WorkspaceMember).where(WorkspaceMember.user_id == target_id)
    )


# ============================================================
# Ownership report and finalization
# ============================================================

def find_owned_workspaces(target_id: int) -> List[OrphanedWorkspace]:
    """Workspaces owned by the user. Read-only; ownership is never reassigned here."""
    with store_errors("find owned workspaces"):
        rows = db.session.execute(
            select(Workspace.id, Workspace.name)
            .where(Workspace.owner_id == target_id)
            .order_by(Workspace.id)
        ).all()
    return [OrphanedWorkspace(id=row.id, name=row.name) for row in rows]


def finalize_user_deletion(target_id: int) -> int:
    """Delete the user row. Must only run after every reassignment pass."""
    return _run_bulk("delete user", delete(User).where(User.id == target_id))


def _count(stmt) -> int:
    with store_errors("count related records"):
        return db.session.execute(select(func.count()).select_from(stmt.subquery())).scalar() or 0


class UserDeletionService:
    """
    Runs the delete-user-preserve-data job.

    Passes run sequentially in a fixed order; the sentinel id and the user's
    original identity are handed to each pass explicitly.
    """

    @staticmethod
    def preview(identifier: str) -> UserDeletionPreview:
        """Resolve the user and count what a deletion would touch, without writing."""
        user = resolve_target_user(identifier)
        uid = user.id
        return UserDeletionPreview(
            user_id=uid,
            user_name=user.name,
            user_email=user.email,
            user_phone=user.phone_number,
            tasks_created=_count(select(Task.id).where(Task.created_by_id == uid)),
            tasks_assigned=_count(select(TaskAssignee.id).where(TaskAssignee.user_id == uid)),
            manager_tasks=_count(select(Task.id).where(Task.responsible_manager_id == uid)),
            watched_tasks=_count(select(TaskWatcher.id).where(TaskWatcher.user_id == uid)),
            comments=_count(select(TaskComment.id).where(TaskComment.author_id == uid)),
            responses=_count(select(TaskResponse.id).where(TaskResponse.author_id == uid)),
            activities=_count(select(ActivityLog.id).where(ActivityLog.user_id == uid)),
            workspaces=_count(select(WorkspaceMember.id).where(WorkspaceMember.user_id == uid)),
            orphaned_workspaces=find_owned_workspaces(uid),
        )

    @staticmethod
    def delete_user_preserve_data(identifier: str,
                                  progress: Optional[ProgressCallback] = None) -> UserDeletionSummary:
        """
        Delete the user matching ``identifier`` and hand their records to the
        sentinel account.

        Args:
            identifier: email, phone number or user id
            progress: called as ``progress(pass_name, count)`` after each pass;
                count is None for passes that are not part of the summary

        Returns:
            UserDeletionSummary with per-pass counts and orphaned workspaces

        Raises:
            NotFoundError, InvalidTargetError: before anything is modified
            StoreError: a pass failed; earlier passes stay committed
        """
        report = progress or (lambda name, count: None)

        user = resolve_target_user(identifier)
        target_id = user.id
        original_name = user.name
        original_email = user.email

        logger.info(f"[USER_DELETION] Deleting user id={target_id} ({user.display_identifier})")

        sentinel = get_or_create_sentinel_user()
        sentinel_id = sentinel.id

        summary = UserDeletionSummary(
            user_id=target_id,
            user_name=original_name,
            user_email=original_email,
            sentinel_id=sentinel_id,
        )

        summary.tasks_created = reassign_created_tasks(target_id, sentinel_id, original_name, original_email)
        report('tasks_created', summary.tasks_created)

        summary.tasks_assigned = remove_from_task_assignees(target_id)
        report('tasks_assigned', summary.tasks_assigned)

        summary.manager_tasks = clear_responsible_manager(target_id)
        report('manager_tasks', summary.manager_tasks)

        watchers_removed = remove_from_task_watchers(target_id)
        logger.info(f"[USER_DELETION] Removed from {watchers_removed} watcher lists")
        report('watchers', None)

        summary.comments = reassign_comment_authors(target_id, sentinel_id, original_name)
        report('comments', summary.comments)

        summary.responses = reassign_response_authors(target_id, sentinel_id, original_name)
        report('responses', summary.responses)

        summary.activities = reassign_activity_logs(target_id, sentinel_id, original_name, original_email)
        report('activities', summary.activities)

        summary.workspaces = remove_workspace_memberships(target_id)
        report('workspaces', summary.workspaces)

        summary.orphaned_workspaces = find_owned_workspaces(target_id)
        if summary.orphaned_workspaces:
            logger.warning(
                f"[USER_DELETION] User id={target_id} still owns "
                f"{summary.orphaned_workspace_count} workspace(s):"
            )
            for ws in summary.orphaned_workspaces:
                logger.warning(f"  - {ws.name} (ID: {ws.id})")

        finalize_user_deletion(target_id)
        logger.info(f"[USER_DELETION] User id={target_id} deleted: {summary.to_dict()}")

        return summary
