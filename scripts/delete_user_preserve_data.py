#!/usr/bin/env python3
"""
Delete a user without losing their data.

Tasks, comments, responses and activity records are handed to the
"[Deleted user]" system account with the original name kept; the user is
removed from assignee, watcher and workspace member lists; the account itself
is deleted last.

Usage:
    python scripts/delete_user_preserve_data.py user@example.com
    python scripts/delete_user_preserve_data.py +992901234567
    python scripts/delete_user_preserve_data.py 42
    python scripts/delete_user_preserve_data.py user@example.com --dry-run
"""

import argparse
import logging
import os
import sys
import traceback

# Add parent directory to path so we can import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db
from services.maintenance_errors import (
    ConfigurationError,
    InvalidTargetError,
    MaintenanceError,
    NotFoundError,
)
from services.user_deletion_service import UserDeletionService

USAGE = """
Delete a user without losing their data

Usage:
  python scripts/delete_user_preserve_data.py <user id | email | phone> [--dry-run]

What it does:
  1. Finds the user by ID, email or phone number
  2. Moves created tasks to the "[Deleted user]" system account
  3. Removes the user from assignees, watchers and responsible manager
  4. Moves comments and responses, keeping the author name
  5. Moves activity records, keeping name and email in details
  6. Removes the user from every workspace member list
  7. Deletes the user
"""

PASS_LABELS = {
    'tasks_created': "📝 Created tasks reassigned",
    'tasks_assigned': "👥 Removed from assigned tasks",
    'manager_tasks': "👔 Cleared as responsible manager",
    'watchers': "👁️  Removed from task watchers",
    'comments': "💬 Comments reassigned",
    'responses': "📨 Responses reassigned",
    'activities': "📊 Activity records reassigned",
    'workspaces': "🏢 Removed from workspaces",
}

SUMMARY_FIELDS = [
    ('tasks_created', "Created tasks reassigned"),
    ('tasks_assigned', "Removed from assigned tasks"),
    ('manager_tasks', "Tasks as responsible manager"),
    ('comments', "Comments reassigned"),
    ('responses', "Responses reassigned"),
    ('activities', "Activity records"),
    ('workspaces', "Workspaces left"),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Delete a user while preserving their data")
    parser.add_argument("identifier", nargs="?", help="User ID, email or phone number")
    parser.add_argument("--dry-run", action="store_true", help="Only show what would change")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging and tracebacks")
    return parser


def print_progress(name, count):
    label = PASS_LABELS.get(name, name)
    if count is None:
        print(f"   {label}")
    else:
        print(f"   {label}: {count}")


def print_orphaned_workspaces(orphaned):
    if not orphaned:
        return
    print(f"\n⚠️  WARNING: the user still owns {len(orphaned)} workspace(s):")
    for ws in orphaned:
        print(f"   - {ws.name} (ID: {ws.id})")
    print("   Ownership was not transferred. Assign a new owner to these workspaces.")


def print_preview(preview):
    print("\n📋 User found:")
    print(f"   ID: {preview.user_id}")
    print(f"   Name: {preview.user_name}")
    print(f"   Email: {preview.user_email or 'none'}")
    print(f"   Phone: {preview.user_phone or 'none'}")
    print("\n[DRY RUN] Records that would change:")
    for key, label in SUMMARY_FIELDS:
        print(f"   {label}: {getattr(preview, key)}")
    print(f"   Watched tasks: {preview.watched_tasks}")
    print_orphaned_workspaces(preview.orphaned_workspaces)


def print_summary(summary):
    print(f"\n✅ User \"{summary.user_name}\" deleted")
    print("\n📊 Summary:")
    for key, label in SUMMARY_FIELDS:
        print(f"   {label}: {getattr(summary, key)}")
    print(f"   Orphaned workspaces: {summary.orphaned_workspace_count}")
    print(f"   Data now belongs to system user ID: {summary.sentinel_id}")
    print("\n📝 Original identity kept in:")
    print(f"   - tasks.original_creator_name: \"{summary.user_name}\"")
    print(f"   - original_author_name on comments and responses: \"{summary.user_name}\"")
    print(f"   - activity_logs.details.originalUserName: \"{summary.user_name}\"")


def run(identifier: str, dry_run: bool = False) -> int:
    """Run inside an app context. Returns the process exit code."""
    print(f"\n🔍 Looking up user: {identifier}")

    if dry_run:
        print_preview(UserDeletionService.preview(identifier))
        return 0

    print("\n🔄 Moving data...\n")
    summary = UserDeletionService.delete_user_preserve_data(identifier, progress=print_progress)
    print_orphaned_workspaces(summary.orphaned_workspaces)
    print_summary(summary)
    return 0


def main(argv=None, app=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.ERROR)

    if not args.identifier:
        print(USAGE)
        return 1

    try:
        if app is None:
            app = create_app()
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e.message}")
        return 1

    with app.app_context():
        try:
            return run(args.identifier, dry_run=args.dry_run)
        except NotFoundError:
            print(f"❌ User not found: {args.identifier}")
            print("   Use the exact email, phone number or user ID")
            return 1
        except InvalidTargetError as e:
            print(f"❌ {e.message}")
            return 1
        except MaintenanceError as e:
            print(f"❌ Error: {e.message}")
            print("   Changes made before the failure are kept; re-run to finish.")
            if args.verbose:
                traceback.print_exc()
            return 1
        except Exception as e:
            print(f"❌ Unexpected error: {e}")
            if args.verbose:
                traceback.print_exc()
            return 1
        finally:
            db.session.remove()


if __name__ == '__main__':
    sys.exit(main())
