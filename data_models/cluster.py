"""Cluster schemas for prompt trend clusters."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from data_models.post import MediaType, VisualFeatures


class ClusterStatus(str, Enum):
    """Lifecycle stage of a trend cluster.

    DECLINING is never produced by scoring; it is only set by admin action.
    """

    EMERGING = "emerging"
    TRENDING = "trending"
    VIRAL = "viral"
    STABLE = "stable"
    DECLINING = "declining"


class ClusterMetrics(BaseModel):
    """Aggregate statistics computed from a cluster's members."""

    creator_count: int = 0
    platform_count: int = 0
    avg_engagement_velocity: float = 0
    total_posts: int = 0
    total_likes: int = 0
    total_views: int = 0


class ClusterSummary(BaseModel):
    """Persisted cluster as exposed by the API."""

    id: str
    name: str | None = None
    media_type: MediaType
    trend_score: int = Field(..., ge=0, le=100)
    status: ClusterStatus
    visual_features: VisualFeatures = Field(default_factory=VisualFeatures)
    metrics: ClusterMetrics = Field(default_factory=ClusterMetrics)
    platforms: list[str] = Field(default_factory=list)
    generated_prompt: str = ""
    post_count: int = 0
    representative_post_id: str | None = None
    is_approved: bool = False
    is_rejected: bool = False
    notification_sent: bool = False
    published_prompt_id: str | None = None
    created_at: datetime | None = None

    class Config:
        use_enum_values = True
