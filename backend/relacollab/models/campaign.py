"""Campaign and application documents."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from relacollab.core.database import Base


class Campaign(Base):
    """
    A brand's campaign.

    The full campaign document lives in `data` (camelCase keys, exactly as the
    web app writes it). `status` and `brand_id` are lifted out for indexing.
    """

    __tablename__ = "campaigns"

    id = Column(String(128), primary_key=True)
    brand_id = Column(String(128), nullable=True)
    status = Column(String(50), nullable=True)  # "draft", "active", "completed", ...

    data = Column(JSONB, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_campaigns_status", "status"),
        Index("idx_campaigns_brand", "brand_id"),
    )

    def to_document(self) -> dict:
        """Return the stored document with its id and indexed fields."""
        doc = dict(self.data or {})
        doc["id"] = self.id
        if self.brand_id is not None:
            doc.setdefault("brandId", self.brand_id)
        if self.status is not None:
            doc["status"] = self.status
        return doc

    def __repr__(self) -> str:
        return f"<Campaign(id='{self.id}', status='{self.status}')>"


class CampaignApplication(Base):
    """A creator's application to a campaign."""

    __tablename__ = "campaign_applications"

    id = Column(String(128), primary_key=True)
    campaign_id = Column(String(128), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    creator_id = Column(String(128), ForeignKey("creators.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(50), nullable=False, default="pending")  # "pending", "approved", "rejected"

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("campaign_id", "creator_id", name="uq_application_campaign_creator"),
        Index("idx_applications_campaign", "campaign_id"),
    )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "campaignId": self.campaign_id,
            "creatorId": self.creator_id,
            "status": self.status,
        }
