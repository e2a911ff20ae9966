"""Initial schema with teams, users, pull requests and reviewer links.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'teams',
        sa.Column('team_name', sa.String(255), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'users',
        sa.Column('user_id', sa.String(255), primary_key=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('team_name', sa.String(255), sa.ForeignKey('teams.team_name'), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_team_name', 'users', ['team_name'])
    op.create_index('idx_users_team_active', 'users', ['team_name', 'is_active'])

    op.create_table(
        'pull_requests',
        sa.Column('pull_request_id', sa.String(255), primary_key=True),
        sa.Column('pull_request_name', sa.String(500), nullable=False),
        sa.Column('author_id', sa.String(255), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('status', sa.Enum('OPEN', 'MERGED', name='pr_status'), nullable=False, server_default='OPEN'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('merged_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_pull_requests_author_id', 'pull_requests', ['author_id'])

    op.create_table(
        'pr_reviewers',
        sa.Column('pr_id', sa.String(255), sa.ForeignKey('pull_requests.pull_request_id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_id', sa.String(255), sa.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('slot', sa.Integer, nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('pr_id', 'reviewer_id', name='pk_pr_reviewers'),
        sa.UniqueConstraint('pr_id', 'slot', name='uq_pr_reviewer_slot'),
    )
    op.create_index('ix_pr_reviewers_reviewer_id', 'pr_reviewers', ['reviewer_id'])


def downgrade() -> None:
    op.drop_index('ix_pr_reviewers_reviewer_id', table_name='pr_reviewers')
    op.drop_table('pr_reviewers')
    op.drop_index('ix_pull_requests_author_id', table_name='pull_requests')
    op.drop_table('pull_requests')
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS pr_status")
    op.drop_index('idx_users_team_active', table_name='users')
    op.drop_index('ix_users_team_name', table_name='users')
    op.drop_table('users')
    op.drop_table('teams')
