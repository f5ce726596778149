from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from enum import Enum


class CompensationType(str, Enum):
    """How a brand pays for a campaign."""
    MONETARY = "monetary"
    EXCHANGE = "exchange"


class AgeRange(str, Enum):
    """Target audience age brackets offered by the campaign wizard."""
    AGE_18_24 = "18-24"
    AGE_25_34 = "25-34"
    AGE_35_44 = "35-44"
    AGE_45_PLUS = "45+"


class Campaign(BaseModel):
    """Campaign document as stored by the marketplace.

    Only the fields used for matching and listing are modelled; anything else
    in the document is ignored. Every field is optional because campaigns are
    created through a multi-step wizard and may be read while half-filled.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = None
    brand_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = Field(
        default=None,
        description="Lifecycle status: 'draft', 'active', 'completed', ..."
    )

    # Targeting
    location: Optional[str] = Field(default=None, description="Free-text target geography")
    age_range: Optional[AgeRange] = None
    vibes: List[str] = Field(
        default_factory=list,
        description="Brand-vibe tags, e.g. 'romantic', 'party', 'premium'"
    )
    content_types: List[str] = Field(
        default_factory=list,
        description="Required deliverable formats: 'post', 'video', 'stories', 'carousel'"
    )
    compensation_type: Optional[CompensationType] = None
    goal: Optional[str] = None


class CampaignSummary(BaseModel):
    """Compact campaign view returned in opportunity lists."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    brand_id: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    compensation_type: Optional[str] = None
    goal: Optional[str] = None
    status: Optional[str] = None
