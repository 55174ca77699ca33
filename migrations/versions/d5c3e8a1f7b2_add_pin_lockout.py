"""Track failed PIN attempts and lockouts per user

Revision ID: d5c3e8a1f7b2
Revises: 8b41e0d2c6a9
Create Date: 2026-02-17 10:04:52.731904

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'd5c3e8a1f7b2'
down_revision = '8b41e0d2c6a9'
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    columns = [col['name'] for col in inspector.get_columns('users')]

    with op.batch_alter_table('users') as batch_op:
        if 'failed_pin_attempts' not in columns:
            batch_op.add_column(sa.Column('failed_pin_attempts', sa.Integer(), nullable=False,
                                          server_default='0'))
        if 'locked_until' not in columns:
            batch_op.add_column(sa.Column('locked_until', sa.DateTime(), nullable=True))


def downgrade():
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('locked_until')
        batch_op.drop_column('failed_pin_attempts')
