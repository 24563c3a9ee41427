"""create admin_users table

Revision ID: 8f4d2c6a1b55
Revises: 3c1a9e2b7d10
Create Date: 2026-10-19 09:20:03.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '8f4d2c6a1b55'
down_revision = '3c1a9e2b7d10'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'admin_users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_admin_users_email', 'admin_users', ['email'], unique=True)


def downgrade():
    op.drop_index('ix_admin_users_email', table_name='admin_users')
    op.drop_table('admin_users')
