"""create case_studies table

Revision ID: 3c1a9e2b7d10
Revises:
Create Date: 2026-10-19 09:12:44.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3c1a9e2b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'case_studies',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_time', sa.String(50), nullable=True),
        sa.Column('author', sa.String(80), nullable=True),
        sa.Column('thumbnail', sa.String(1024), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    # slug 唯一（公开页按 slug 查）；date 用于默认排序
    op.create_index('ix_case_studies_slug', 'case_studies', ['slug'], unique=True)
    op.create_index('ix_case_studies_date', 'case_studies', ['date'], unique=False)


def downgrade():
    op.drop_index('ix_case_studies_date', table_name='case_studies')
    op.drop_index('ix_case_studies_slug', table_name='case_studies')
    op.drop_table('case_studies')
