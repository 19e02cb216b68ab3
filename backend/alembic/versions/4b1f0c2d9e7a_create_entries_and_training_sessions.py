"""create entries + training sessions/items

Revision ID: 4b1f0c2d9e7a
Revises:
Create Date: 2026-10-19 10:12:40.118203

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1f0c2d9e7a'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) entries (list columns hold JSON text)
    op.create_table(
        'entries',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False, index=True),
        sa.Column('subcategory', sa.String(length=120), nullable=True),
        sa.Column('belts', sa.Text(), nullable=True),
        sa.Column('tags', sa.Text(), nullable=False),
        sa.Column('content_md', sa.Text(), nullable=False, server_default=''),
        sa.Column('reference_urls', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('video_url', sa.String(length=2048), nullable=True),
        sa.Column('image_urls', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, index=True),
    )

    # 2) training_sessions
    op.create_table(
        'training_sessions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('categories', sa.Text(), nullable=False),
        sa.Column('entry_count', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, index=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
    )

    # 3) training_session_items (entry_id deliberately not a FK)
    op.create_table(
        'training_session_items',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('session_id', sa.String(length=36), sa.ForeignKey('training_sessions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('entry_id', sa.String(length=36), nullable=False, index=True),
        sa.Column('entry_title', sa.String(length=255), nullable=False),
        sa.Column('entry_category', sa.String(length=32), nullable=False),
        sa.Column('time_allocated_seconds', sa.Integer(), nullable=False),
        sa.Column('variation_type', sa.String(length=32), nullable=True),
        sa.Column('variation_text', sa.Text(), nullable=True),
        sa.Column('sequence_order', sa.Integer(), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('session_id', 'sequence_order', name='uq_session_item_order'),
    )


def downgrade() -> None:
    # drop child table first
    op.drop_table('training_session_items')
    op.drop_table('training_sessions')
    op.drop_table('entries')
