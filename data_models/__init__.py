"""Data models for PromptPulse."""

from data_models.cluster import ClusterMetrics, ClusterStatus, ClusterSummary
from data_models.post import (
    VISUAL_CATEGORIES,
    MediaType,
    Platform,
    PostCreate,
    RawPost,
    TextSignals,
    VisualFeatures,
)
from data_models.prompt import PromptSummary

__all__ = [
    "VISUAL_CATEGORIES",
    "MediaType",
    "Platform",
    "PostCreate",
    "RawPost",
    "TextSignals",
    "VisualFeatures",
    "ClusterMetrics",
    "ClusterStatus",
    "ClusterSummary",
    "PromptSummary",
]
