"""Published prompt schema."""

from datetime import datetime

from pydantic import BaseModel, Field

from data_models.post import MediaType


class PromptSummary(BaseModel):
    """Published prompt as exposed by the API."""

    id: str
    text: str
    type: MediaType
    preview_url: str | None = None
    preview_type: MediaType = MediaType.IMAGE
    platforms: list[str] = Field(default_factory=list)
    ai_tools: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    style: str | None = None
    emotion: str | None = None
    trend_score: int = Field(0, ge=0, le=100)
    first_seen_at: datetime | None = None
    cross_platform_count: int = 0
    creator_count: int = 0
    engagement_velocity: float = 0
    cluster_id: str | None = None
    is_approved: bool = False
    created_at: datetime | None = None

    class Config:
        use_enum_values = True
