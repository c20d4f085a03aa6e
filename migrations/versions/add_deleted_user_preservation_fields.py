"""Add preservation fields for deleting users without losing their data

Revision ID: vazifa_deleted_user_fields
Revises:
Create Date: 2026-10-19

Columns written by scripts/delete_user_preserve_data.py when a user's records
are handed to the "[Deleted user]" system account:
- tasks.original_creator_name / original_creator_email
- task_comments.original_author_name
- task_responses.original_author_name
- users.disabled_reason (explains why the system account is disabled)

workspaces.owner_id loses its foreign key so a deleted owner leaves the
workspace in place, still pointing at the former owner id.

Nested keys on activity_logs.details need no schema change.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'vazifa_deleted_user_fields'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.add_column('tasks', sa.Column('original_creator_name', sa.String(120), nullable=True))
    op.add_column('tasks', sa.Column('original_creator_email', sa.String(120), nullable=True))
    op.add_column('task_comments', sa.Column('original_author_name', sa.String(120), nullable=True))
    op.add_column('task_responses', sa.Column('original_author_name', sa.String(120), nullable=True))
    op.add_column('users', sa.Column('disabled_reason', sa.String(255), nullable=True))

    # The responsible-manager pass filters on this column
    op.create_index('ix_tasks_responsible_manager', 'tasks', ['responsible_manager_id'])

    op.drop_constraint('workspaces_owner_id_fkey', 'workspaces', type_='foreignkey')


def downgrade():
    op.create_foreign_key(
        'workspaces_owner_id_fkey',
        'workspaces', 'users',
        ['owner_id'], ['id']
    )
    op.drop_index('ix_tasks_responsible_manager', table_name='tasks')
    op.drop_column('users', 'disabled_reason')
    op.drop_column('task_responses', 'original_author_name')
    op.drop_column('task_comments', 'original_author_name')
    op.drop_column('tasks', 'original_creator_email')
    op.drop_column('tasks', 'original_creator_name')
