"""Initial schema: campaigns, creators, applications, match cache

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Campaign documents (ids come from the web app)
    op.create_table(
        'campaigns',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('brand_id', sa.String(128), nullable=True),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('data', postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('idx_campaigns_status', 'campaigns', ['status'])
    op.create_index('idx_campaigns_brand', 'campaigns', ['brand_id'])

    # Creator profile documents
    op.create_table(
        'creators',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('data', postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('idx_creators_status', 'creators', ['status'])

    # Applications
    op.create_table(
        'campaign_applications',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('campaign_id', sa.String(128), sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('creator_id', sa.String(128), sa.ForeignKey('creators.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.UniqueConstraint('campaign_id', 'creator_id', name='uq_application_campaign_creator'),
    )
    op.create_index('idx_applications_campaign', 'campaign_applications', ['campaign_id'])

    # Cached matches (rule-based result + AI sidecar fields)
    op.create_table(
        'campaign_matches',
        sa.Column('campaign_id', sa.String(128), sa.ForeignKey('campaigns.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('creator_id', sa.String(128), sa.ForeignKey('creators.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('score', sa.Integer, nullable=True),
        sa.Column('reasons', postgresql.JSONB, nullable=True),
        sa.Column('breakdown', postgresql.JSONB, nullable=True),
        sa.Column('ai_status', sa.String(20), nullable=True),
        sa.Column('ai_analysis', postgresql.JSONB, nullable=True),
        sa.Column('ai_error', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('score IS NULL OR (score >= 0 AND score <= 100)', name='match_score_range'),
    )
    op.create_index('idx_campaign_matches_score', 'campaign_matches', ['campaign_id', 'score'])
    op.create_index('idx_campaign_matches_ai_status', 'campaign_matches', ['ai_status'])


def downgrade() -> None:
    op.drop_index('idx_campaign_matches_ai_status', table_name='campaign_matches')
    op.drop_index('idx_campaign_matches_score', table_name='campaign_matches')
    op.drop_table('campaign_matches')

    op.drop_index('idx_applications_campaign', table_name='campaign_applications')
    op.drop_table('campaign_applications')

    op.drop_index('idx_creators_status', table_name='creators')
    op.drop_table('creators')

    op.drop_index('idx_campaigns_brand', table_name='campaigns')
    op.drop_index('idx_campaigns_status', table_name='campaigns')
    op.drop_table('campaigns')
