"""Store the PIN hash format next to the hash

Revision ID: 8b41e0d2c6a9
Revises: 3f2a9c1d7e54
Create Date: 2026-02-03 14:30:05.118274

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8b41e0d2c6a9'
down_revision = '3f2a9c1d7e54'
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    columns = [col['name'] for col in inspector.get_columns('users')]

    if 'pin_hash_format' not in columns:
        op.add_column('users', sa.Column('pin_hash_format', sa.String(20), nullable=True))

        # Existing hashes are either "salt:hexdigest" or a bare SHA-256 hexdigest
        op.execute("UPDATE users SET pin_hash_format = 'salted_sha256' "
                   "WHERE pin_hash_format IS NULL AND pin_hash LIKE '%:%'")
        op.execute("UPDATE users SET pin_hash_format = 'sha256' WHERE pin_hash_format IS NULL")

        with op.batch_alter_table('users') as batch_op:
            batch_op.alter_column('pin_hash_format', existing_type=sa.String(20), nullable=False)


def downgrade():
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('pin_hash_format')
