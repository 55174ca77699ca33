"""Add users, teams, team members and team invitations

Revision ID: 3f2a9c1d7e54
Revises: 
Create Date: 2026-01-28 09:12:41.502318

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2a9c1d7e54'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Older deployments already have users (and the agency tables)
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(100), nullable=False),
            sa.Column('email', sa.String(255), nullable=True),
            sa.Column('pin_hash', sa.String(255), nullable=False),
            sa.Column('color', sa.String(20), nullable=False, server_default='#1e3a5f'),
            sa.Column('global_role', sa.String(20), nullable=False, server_default='user'),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('last_login', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('name')
        )

    if 'teams' not in tables:
        op.create_table('teams',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(100), nullable=False),
            sa.Column('slug', sa.String(100), nullable=False),
            sa.Column('primary_color', sa.String(20), nullable=True),
            sa.Column('secondary_color', sa.String(20), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('slug')
        )

    if 'team_members' not in tables:
        op.create_table('team_members',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('team_id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('role', sa.String(20), nullable=False),
            sa.Column('status', sa.String(20), nullable=True),
            sa.Column('is_default_team', sa.Boolean(), nullable=True),
            sa.Column('joined_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('team_id', 'user_id')
        )

    if 'team_invitations' not in tables:
        op.create_table('team_invitations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('team_id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(255), nullable=False),
            sa.Column('role', sa.String(20), nullable=False),
            sa.Column('token', sa.String(255), nullable=False),
            sa.Column('invited_by', sa.Integer(), nullable=True),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
            sa.Column('accepted_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['invited_by'], ['users.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('token')
        )
        op.create_index('ix_team_invitations_email', 'team_invitations', ['email'])


def downgrade():
    # users is left in place: agency deployments had it before this revision
    # and their agency_members rows still reference it
    op.drop_index('ix_team_invitations_email', table_name='team_invitations')
    op.drop_table('team_invitations')
    op.drop_table('team_members')
    op.drop_table('teams')
