from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from enum import Enum


class CollaborationPreference(str, Enum):
    """Compensation a creator accepts (values as stored by the onboarding form)."""
    MONETARY = "Con remuneración"
    EXCHANGE = "Intercambios"
    BOTH = "Ambos"


class InstagramMetrics(BaseModel):
    """Metrics fetched from the creator's connected Instagram account."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    followers: int = 0
    engagement_rate: float = Field(default=0.0, description="Engagement rate as a percentage (4.2 = 4.2%)")


class CreatorProfile(BaseModel):
    """Creator profile document.

    Mirrors the onboarding answers plus connected-platform state. All fields
    are optional; profiles are scored while still being completed.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = None
    display_name: Optional[str] = None
    status: Optional[str] = Field(default=None, description="'active', 'pending', ...")
    location: Optional[str] = None

    # Content niches. `vibes` takes precedence over `categories`/`tags` when scoring.
    vibes: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    content_formats: List[str] = Field(
        default_factory=list,
        description="Formats the creator produces: 'post', 'video', 'stories', 'carousel', 'reels'"
    )
    who_appears_in_content: List[str] = Field(
        default_factory=list,
        description="Onboarding answers: 'Solo yo', 'Mi pareja', 'Mi familia', 'Mis amigos'"
    )
    experience_time: Optional[str] = Field(
        default=None,
        description="Time creating content: 'Menos de 6 meses', '6-12 meses', '1-2 años', '3+ años'"
    )
    has_brand_experience: bool = False
    collaboration_preference: Optional[CollaborationPreference] = None

    # Connected platforms
    instagram_connected: bool = False
    tiktok_connected: bool = False
    instagram_metrics: Optional[InstagramMetrics] = None
