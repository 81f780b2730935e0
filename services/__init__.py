"""Services for PromptPulse."""

from services.cluster_admin import ClusterAdminService, ClusterNotFoundError, PublishError
from services.prompt_catalog import PromptCatalog, PromptNotFoundError
from services.trend_pipeline import (
    TrendPipeline,
    publish_approved_clusters,
    run_trend_pipeline,
    send_viral_notifications,
)

__all__ = [
    "TrendPipeline",
    "run_trend_pipeline",
    "send_viral_notifications",
    "publish_approved_clusters",
    "ClusterAdminService",
    "ClusterNotFoundError",
    "PublishError",
    "PromptCatalog",
    "PromptNotFoundError",
]
