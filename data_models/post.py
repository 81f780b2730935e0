"""Post schemas for scraped AI-media content items."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Content platform a post was scraped from."""

    YOUTUBE = "youtube"
    REDDIT = "reddit"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    LEXICA = "lexica"
    CIVITAI = "civitai"
    PROMPTHERO = "prompthero"
    PINTEREST = "pinterest"


class MediaType(str, Enum):
    """Kind of media a post carries."""

    IMAGE = "image"
    VIDEO = "video"


VISUAL_CATEGORIES = ("subjects", "emotion", "style", "motion", "environment")


class VisualFeatures(BaseModel):
    """Five-category visual tag bundle shared by posts and clusters."""

    subjects: list[str] = Field(default_factory=list)
    emotion: list[str] = Field(default_factory=list)
    style: list[str] = Field(default_factory=list)
    motion: list[str] = Field(default_factory=list)
    environment: list[str] = Field(default_factory=list)


class TextSignals(VisualFeatures):
    """Keyword signals extracted from free text."""

    quality: list[str] = Field(default_factory=list)
    ai_tools: list[str] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list)


class RawPost(BaseModel):
    """Item returned by a content source before signal extraction."""

    platform: Platform
    source_id: str = Field(..., description="Platform-native identifier")
    source_url: str
    media_type: MediaType
    media_url: str | None = None
    thumbnail_url: str | None = None
    title: str | None = None
    caption: str = Field(default="", description="Caption, description or selftext")
    hashtags: list[str] = Field(default_factory=list)
    visual_hints: VisualFeatures = Field(
        default_factory=VisualFeatures,
        description="Visual tags supplied by the source, if any",
    )
    engagement_velocity: float = Field(default=0, ge=0, description="Platform-specific velocity (0-100)")
    likes: int = 0
    views: int = 0
    comments: int = 0
    shares: int = 0
    creator_id: str
    creator_username: str | None = None
    published_at: datetime | None = None

    class Config:
        use_enum_values = True


class PostCreate(BaseModel):
    """Canonical post shape written to the database."""

    platform: Platform
    source_id: str
    source_url: str
    media_type: MediaType
    media_url: str | None = None
    thumbnail_url: str | None = None
    title: str | None = None
    caption: str = ""
    hashtags: list[str] = Field(default_factory=list)
    visual_features: VisualFeatures = Field(default_factory=VisualFeatures)
    text_signals: TextSignals = Field(default_factory=TextSignals)
    engagement_velocity: float = 0
    likes: int = 0
    views: int = 0
    comments: int = 0
    shares: int = 0
    creator_id: str
    creator_username: str | None = None
    published_at: datetime | None = None
    scraped_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True

