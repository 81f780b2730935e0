"""Trend scoring module for cluster metrics, trend score and lifecycle status."""

import logging
import math

import numpy as np

from data_models.cluster import ClusterMetrics, ClusterStatus

logger = logging.getLogger(__name__)


def _attr(post, name: str, default=None):
    if isinstance(post, dict):
        value = post.get(name, default)
    else:
        value = getattr(post, name, default)
    return default if value is None else value


def compute_cluster_metrics(posts: list) -> ClusterMetrics:
    """Aggregate statistics over a cluster's members.

    Args:
        posts: Cluster members (PreparedPost, ORM rows or dicts)

    Returns:
        ClusterMetrics; all zeros when there are no members
    """
    if not posts:
        return ClusterMetrics()

    velocities = [float(_attr(post, "engagement_velocity", 0)) for post in posts]

    return ClusterMetrics(
        creator_count=len({_attr(post, "creator_id") for post in posts}),
        platform_count=len({_attr(post, "platform") for post in posts}),
        avg_engagement_velocity=float(np.mean(velocities)),
        total_posts=len(posts),
        total_likes=sum(int(_attr(post, "likes", 0)) for post in posts),
        total_views=sum(int(_attr(post, "views", 0)) for post in posts),
    )


class TrendScorer:
    """Calculate a bounded trend score and classify it into a lifecycle stage."""

    def __init__(
        self,
        velocity_weight: float = 0.4,
        creator_weight: float = 0.3,
        platform_weight: float = 0.2,
        volume_weight: float = 0.1,
    ):
        """Initialize scorer with configurable weights.

        Args:
            velocity_weight: Weight for average engagement velocity
            creator_weight: Weight for creator diversity
            platform_weight: Weight for platform spread
            volume_weight: Weight for number of posts
        """
        self.velocity_weight = velocity_weight
        self.creator_weight = creator_weight
        self.platform_weight = platform_weight
        self.volume_weight = volume_weight

    def calculate_score(self, metrics: ClusterMetrics) -> int:
        """Calculate the trend score (0-100) from cluster metrics.

        Each sub-score is capped at 100 before weighting. The weighted sum is
        rounded half up and clamped.

        Args:
            metrics: Cluster metrics

        Returns:
            Integer trend score
        """
        velocity_score = min(metrics.avg_engagement_velocity / 10, 100)
        creator_score = min(metrics.creator_count * 10, 100)
        platform_score = min(metrics.platform_count * 25, 100)
        volume_score = min(metrics.total_posts * 5, 100)

        raw = (
            self.velocity_weight * velocity_score +
            self.creator_weight * creator_score +
            self.platform_weight * platform_score +
            self.volume_weight * volume_score
        )

        return int(min(100, max(0, math.floor(raw + 0.5))))

    @staticmethod
    def classify(score: int) -> str:
        """Map a trend score to a lifecycle status.

        ``declining`` is never returned here.
        """
        if score > 90:
            return ClusterStatus.VIRAL.value
        if score > 70:
            return ClusterStatus.TRENDING.value
        if score > 40:
            return ClusterStatus.EMERGING.value
        return ClusterStatus.STABLE.value


_default_scorer = TrendScorer()


def calculate_trend_score(metrics: ClusterMetrics) -> int:
    """Convenience function to score metrics with default weights."""
    return _default_scorer.calculate_score(metrics)


def classify_trend(score: int) -> str:
    """Convenience function for TrendScorer.classify."""
    return TrendScorer.classify(score)


def get_metrics_dict(metrics: ClusterMetrics) -> dict:
    """Convert ClusterMetrics to a JSON-ready dictionary.

    Args:
        metrics: ClusterMetrics object

    Returns:
        Dictionary representation
    """
    return {
        "creator_count": metrics.creator_count,
        "platform_count": metrics.platform_count,
        "avg_engagement_velocity": round(metrics.avg_engagement_velocity, 2),
        "total_posts": metrics.total_posts,
        "total_likes": metrics.total_likes,
        "total_views": metrics.total_views,
    }
