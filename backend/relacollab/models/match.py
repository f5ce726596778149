from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from relacollab.core.database import Base


class CampaignMatch(Base):
    """
    Cached match between a campaign and a creator (`campaigns/{id}/matches/{creatorId}`).

    Rule-based columns are overwritten on every re-score; the ai_* columns are
    owned by the AI analysis sidecar and survive re-scoring.
    """

    __tablename__ = "campaign_matches"

    campaign_id = Column(
        String(128),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        primary_key=True,
    )
    creator_id = Column(
        String(128),
        ForeignKey("creators.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Rule-based result
    score = Column(Integer, nullable=True)
    reasons = Column(JSONB, nullable=True)
    breakdown = Column(JSONB, nullable=True)

    # AI sidecar
    ai_status = Column(String(20), nullable=True)  # "pending", "completed", "error"
    ai_analysis = Column(JSONB, nullable=True)
    ai_error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_campaign_matches_score", "campaign_id", "score"),
        Index("idx_campaign_matches_ai_status", "ai_status"),
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="match_score_range"),
    )

    def to_document(self) -> dict:
        return {
            "campaignId": self.campaign_id,
            "creatorId": self.creator_id,
            "score": self.score,
            "reasons": self.reasons or [],
            "breakdown": self.breakdown or {},
            "aiStatus": self.ai_status,
            "aiAnalysis": self.ai_analysis,
            "aiError": self.ai_error,
            "updatedAt": self.updated_at,
        }
