"""create projects and failure_events

Revision ID: 3c9e1f7a2b40
Revises:
Create Date: 2026-10-19 10:12:41.318905

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c9e1f7a2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('project_name', sa.String(length=255), nullable=False),
        sa.Column('signing_key', sa.String(length=255), nullable=True),
        sa.Column('event_key', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_projects')),
    )
    with op.batch_alter_table('projects', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_projects_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_projects_created_at'), ['created_at'], unique=False)

    op.create_table(
        'failure_events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('event_id', sa.String(length=255), nullable=False),
        sa.Column('function_id', sa.String(length=255), nullable=False),
        sa.Column('run_id', sa.String(length=255), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('original_payload', sa.JSON(), nullable=False),
        sa.Column('fixed_payload', sa.JSON(none_as_null=True), nullable=True),
        sa.Column('ai_analysis', sa.Text(), nullable=True),
        sa.Column('fix_confidence', sa.String(length=10), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name=op.f('fk_failure_events_project_id_projects')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_failure_events')),
    )
    with op.batch_alter_table('failure_events', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_failure_events_project_id'), ['project_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_failure_events_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_failure_events_event_id'), ['event_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_failure_events_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_failure_events_created_at'), ['created_at'], unique=False)


def downgrade() -> None:
    with op.batch_alter_table('failure_events', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_failure_events_created_at'))
        batch_op.drop_index(batch_op.f('ix_failure_events_status'))
        batch_op.drop_index(batch_op.f('ix_failure_events_event_id'))
        batch_op.drop_index(batch_op.f('ix_failure_events_user_id'))
        batch_op.drop_index(batch_op.f('ix_failure_events_project_id'))
    op.drop_table('failure_events')

    with op.batch_alter_table('projects', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_projects_created_at'))
        batch_op.drop_index(batch_op.f('ix_projects_user_id'))
    op.drop_table('projects')
