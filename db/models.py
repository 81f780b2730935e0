"""SQLAlchemy ORM models for PromptPulse."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


def empty_visual_features() -> dict:
    return {"subjects": [], "emotion": [], "style": [], "motion": [], "environment": []}


def empty_metrics() -> dict:
    return {
        "creator_count": 0,
        "platform_count": 0,
        "avg_engagement_velocity": 0,
        "total_posts": 0,
        "total_likes": 0,
        "total_views": 0,
    }


class PostModel(Base):
    """Scraped content item, unique per (platform, source_id)."""

    __tablename__ = "posts"
    __table_args__ = (UniqueConstraint("platform", "source_id", name="uq_posts_platform_source_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    platform: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    source_id: Mapped[str] = mapped_column(String(200), nullable=False)
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    # Content
    media_type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    media_url: Mapped[str | None] = mapped_column(String(2048))
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048))
    title: Mapped[str | None] = mapped_column(String(500))
    caption: Mapped[str] = mapped_column(Text, default="")
    hashtags: Mapped[list | None] = mapped_column(JSON, default=list)

    # Features
    visual_features: Mapped[dict | None] = mapped_column(JSON, default=empty_visual_features)
    text_signals: Mapped[dict | None] = mapped_column(JSON, default=dict)

    # Engagement
    engagement_velocity: Mapped[float] = mapped_column(Float, default=0, index=True)
    likes: Mapped[int] = mapped_column(Integer, default=0)
    views: Mapped[int] = mapped_column(Integer, default=0)
    comments: Mapped[int] = mapped_column(Integer, default=0)
    shares: Mapped[int] = mapped_column(Integer, default=0)

    # Creator
    creator_id: Mapped[str] = mapped_column(String(200), nullable=False)
    creator_username: Mapped[str | None] = mapped_column(String(200))

    # Processing status
    processed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    cluster_id: Mapped[str | None] = mapped_column(String(36), index=True)

    # Timestamps
    published_at: Mapped[datetime | None] = mapped_column(DateTime)
    scraped_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ClusterModel(Base):
    """Cluster of similar posts grouped into a prompt trend."""

    __tablename__ = "clusters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    media_type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(300))

    # Members
    post_ids: Mapped[list | None] = mapped_column(JSON, default=list)
    representative_post_id: Mapped[str | None] = mapped_column(String(36))

    # Aggregates
    visual_features: Mapped[dict | None] = mapped_column(JSON, default=empty_visual_features)
    metrics: Mapped[dict | None] = mapped_column(JSON, default=empty_metrics)
    platforms: Mapped[list | None] = mapped_column(JSON, default=list)

    # Trend scoring
    trend_score: Mapped[int] = mapped_column(Integer, default=0, index=True)
    status: Mapped[str] = mapped_column(String(20), default="emerging", index=True)

    generated_prompt: Mapped[str] = mapped_column(Text, nullable=False)

    # Admin moderation
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime)
    is_rejected: Mapped[bool] = mapped_column(Boolean, default=False)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Notification tracking
    notification_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    notification_sent_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Publishing
    published_prompt_id: Mapped[str | None] = mapped_column(String(36))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PromptModel(Base):
    """Published prompt built from an approved cluster."""

    __tablename__ = "prompts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    preview_url: Mapped[str | None] = mapped_column(String(2048))
    preview_type: Mapped[str] = mapped_column(String(10), default="image")

    # Metadata
    platforms: Mapped[list | None] = mapped_column(JSON, default=list)
    ai_tools: Mapped[list | None] = mapped_column(JSON, default=list)
    tags: Mapped[list | None] = mapped_column(JSON, default=list)
    style: Mapped[str | None] = mapped_column(String(100))
    emotion: Mapped[str | None] = mapped_column(String(100))

    # Tracking
    trend_score: Mapped[int] = mapped_column(Integer, default=0, index=True)
    first_seen_at: Mapped[datetime | None] = mapped_column(DateTime)
    cross_platform_count: Mapped[int] = mapped_column(Integer, default=0)
    creator_count: Mapped[int] = mapped_column(Integer, default=0)
    engagement_velocity: Mapped[float] = mapped_column(Float, default=0)

    cluster_id: Mapped[str | None] = mapped_column(String(36), index=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class NotificationModel(Base):
    """Notification record handed to the push delivery service."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict | None] = mapped_column(JSON, default=dict)
    is_global: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class ProcessingJobModel(Base):
    """Track pipeline runs."""

    __tablename__ = "processing_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    job_type: Mapped[str] = mapped_column(String(50), nullable=False)  # 'trend_pipeline', 'publish', 'notify'
    source: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, running, completed, failed
    started_at: Mapped[datetime | None] = mapped_column(DateTime)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    items_processed: Mapped[int] = mapped_column(Integer, default=0)
    items_failed: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text)
    metadata_json: Mapped[dict | None] = mapped_column(JSON, default=dict)
