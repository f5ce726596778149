from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from relacollab.core.database import Base


class Creator(Base):
    """Creator profile document (onboarding answers + connected platform metrics)."""

    __tablename__ = "creators"

    id = Column(String(128), primary_key=True)
    status = Column(String(50), nullable=True)  # "active", "pending", "rejected"

    data = Column(JSONB, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_creators_status", "status"),
    )

    def to_document(self) -> dict:
        doc = dict(self.data or {})
        doc["id"] = self.id
        if self.status is not None:
            doc["status"] = self.status
        return doc

    def __repr__(self) -> str:
        return f"<Creator(id='{self.id}', status='{self.status}')>"
