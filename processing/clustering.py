"""Clustering module for grouping near-duplicate posts into prompt trends.

Greedy, single pass, representative based: each post is compared only with
the first member of every existing cluster of the same media type and joins
the first one that is similar enough. Results depend on input order.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

from data_models.cluster import ClusterMetrics, ClusterStatus
from data_models.post import VISUAL_CATEGORIES, VisualFeatures
from processing.features import aggregate_visual_features
from processing.scoring import TrendScorer, compute_cluster_metrics
from processing.similarity import SimilarityEngine

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.72


@dataclass
class PreparedPost:
    """Normalized post used by clustering and scoring."""

    id: str
    media_type: str
    caption: str
    visual_features: dict[str, list[str]]
    engagement_velocity: float
    platform: str
    creator_id: str
    likes: int = 0
    views: int = 0
    thumbnail_url: str | None = None
    media_url: str | None = None


@dataclass
class TrendCluster:
    """A group of similar posts (potential prompt trend)."""

    id: str
    media_type: str
    posts: list[PreparedPost]
    metrics: ClusterMetrics = field(default_factory=ClusterMetrics)
    trend_score: int = 0
    status: str = ClusterStatus.EMERGING.value
    visual_features: VisualFeatures = field(default_factory=VisualFeatures)
    platforms: list[str] = field(default_factory=list)

    @property
    def representative(self) -> PreparedPost:
        """First admitted member; never replaced."""
        return self.posts[0]

    @property
    def post_ids(self) -> list[str]:
        return [post.id for post in self.posts]


def _value(obj, name: str):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _plain(value):
    return value.value if isinstance(value, Enum) else value


def normalize_tags(tags) -> list[str]:
    """Lower-case, strip and deduplicate tags, keeping first-seen order."""
    return list(dict.fromkeys(str(tag).strip().lower() for tag in (tags or [])))


def prepare_post(post) -> PreparedPost:
    """Normalize a post into the shape clustering works on.

    Accepts ORM rows, pydantic models or dicts. Missing captions and
    features degrade to empty values, missing counters to zero.

    Args:
        post: Post-like object

    Returns:
        PreparedPost
    """
    features = _value(post, "visual_features")
    if features is not None and not isinstance(features, dict):
        features = features.model_dump()
    features = features or {}

    post_id = _value(post, "id")
    if post_id is None:
        post_id = f"{_plain(_value(post, 'platform'))}:{_value(post, 'source_id')}"

    return PreparedPost(
        id=str(post_id),
        media_type=_plain(_value(post, "media_type")),
        caption=_value(post, "caption") or "",
        visual_features={category: normalize_tags(features.get(category)) for category in VISUAL_CATEGORIES},
        engagement_velocity=float(_value(post, "engagement_velocity") or 0),
        platform=_plain(_value(post, "platform")),
        creator_id=str(_value(post, "creator_id")),
        likes=int(_value(post, "likes") or 0),
        views=int(_value(post, "views") or 0),
        thumbnail_url=_value(post, "thumbnail_url"),
        media_url=_value(post, "media_url"),
    )


class PostClusterer:
    """Cluster prepared posts by weighted lexical similarity."""

    def __init__(
        self,
        threshold: float = SIMILARITY_THRESHOLD,
        similarity: SimilarityEngine | None = None,
        scorer: TrendScorer | None = None,
    ):
        """Initialize clusterer.

        Args:
            threshold: Minimum similarity to join an existing cluster
            similarity: Similarity engine, default weights if omitted
            scorer: Trend scorer, default weights if omitted
        """
        self.threshold = threshold
        self.similarity = similarity or SimilarityEngine()
        self.scorer = scorer or TrendScorer()

    def _find_match(self, post: PreparedPost, clusters: list[TrendCluster]) -> TrendCluster | None:
        for cluster in clusters:
            if cluster.media_type != post.media_type:
                continue
            score = self.similarity.total_similarity(post, cluster.representative)
            if score >= self.threshold:
                return cluster
        return None

    def _new_cluster(self, post: PreparedPost) -> TrendCluster:
        return TrendCluster(
            id=str(uuid.uuid4()),
            media_type=post.media_type,
            posts=[post],
            platforms=[post.platform],
        )

    def refresh(self, cluster: TrendCluster) -> TrendCluster:
        """Recompute aggregates from the cluster's full membership."""
        cluster.metrics = compute_cluster_metrics(cluster.posts)
        cluster.trend_score = self.scorer.calculate_score(cluster.metrics)
        cluster.status = self.scorer.classify(cluster.trend_score)
        cluster.visual_features = aggregate_visual_features(cluster.posts)
        cluster.platforms = list(dict.fromkeys(post.platform for post in cluster.posts))
        return cluster

    def cluster(self, posts: list) -> list[TrendCluster]:
        """Cluster a batch of posts.

        Args:
            posts: Post-like objects in ingestion order

        Returns:
            Clusters sorted by trend score, highest first
        """
        clusters: list[TrendCluster] = []

        for post in map(prepare_post, posts):
            match = self._find_match(post, clusters)
            if match is not None:
                match.posts.append(post)
            else:
                clusters.append(self._new_cluster(post))

        for cluster in clusters:
            self.refresh(cluster)

        clusters.sort(key=lambda c: c.trend_score, reverse=True)

        logger.info(f"Clustered {len(posts)} posts into {len(clusters)} clusters (threshold={self.threshold})")
        return clusters

    def add(self, post, clusters: list[TrendCluster]) -> tuple[str, bool]:
        """Admit one post into existing clusters or start a new one.

        Only the touched cluster is recomputed. ``clusters`` is mutated in
        place and is not re-sorted.

        Args:
            post: Post-like object
            clusters: Existing clusters

        Returns:
            Tuple of (cluster_id, is_new)
        """
        prepared = prepare_post(post)
        match = self._find_match(prepared, clusters)

        if match is not None:
            match.posts.append(prepared)
            self.refresh(match)
            return match.id, False

        cluster = self.refresh(self._new_cluster(prepared))
        clusters.append(cluster)
        return cluster.id, True


def cluster_posts(posts: list, threshold: float = SIMILARITY_THRESHOLD) -> list[TrendCluster]:
    """Convenience function to cluster posts with default weights."""
    return PostClusterer(threshold=threshold).cluster(posts)


def recluster_posts(posts: list, threshold: float = SIMILARITY_THRESHOLD) -> list[TrendCluster]:
    """Re-cluster existing posts, typically with a different threshold."""
    return cluster_posts(posts, threshold)


def add_to_cluster(
    post,
    clusters: list[TrendCluster],
    threshold: float = SIMILARITY_THRESHOLD,
) -> tuple[str, bool]:
    """Convenience function for PostClusterer.add."""
    return PostClusterer(threshold=threshold).add(post, clusters)
