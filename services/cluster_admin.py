"""Cluster read and moderation service."""

import logging
from datetime import datetime

from sqlalchemy import func

from data_models.cluster import ClusterMetrics, ClusterStatus, ClusterSummary
from data_models.post import VisualFeatures
from db.database import SessionLocal
from db.models import ClusterModel, PostModel
from processing.prompt_builder import PromptBuilder, enhance_for_ai_tool, generate_negative_prompt
from services.trend_pipeline import build_prompt_record

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "trend_score": (ClusterModel.trend_score.desc(),),
    "recent": (ClusterModel.created_at.desc(),),
}


class ClusterNotFoundError(LookupError):
    """No cluster with the requested id."""


class PublishError(ValueError):
    """A cluster cannot be published in its current state."""


def cluster_to_dict(cluster: ClusterModel) -> dict:
    """Serialize a cluster row through the API schema."""
    return ClusterSummary(
        id=cluster.id,
        name=cluster.name,
        media_type=cluster.media_type,
        trend_score=cluster.trend_score,
        status=cluster.status,
        visual_features=VisualFeatures(**(cluster.visual_features or {})),
        metrics=ClusterMetrics(**(cluster.metrics or {})),
        platforms=cluster.platforms or [],
        generated_prompt=cluster.generated_prompt,
        post_count=len(cluster.post_ids or []),
        representative_post_id=cluster.representative_post_id,
        is_approved=cluster.is_approved,
        is_rejected=cluster.is_rejected,
        notification_sent=cluster.notification_sent,
        published_prompt_id=cluster.published_prompt_id,
        created_at=cluster.created_at,
    ).model_dump(mode="json")


def post_to_dict(post: PostModel) -> dict:
    return {
        "id": post.id,
        "platform": post.platform,
        "source_id": post.source_id,
        "source_url": post.source_url,
        "media_type": post.media_type,
        "media_url": post.media_url,
        "thumbnail_url": post.thumbnail_url,
        "title": post.title,
        "caption": post.caption,
        "visual_features": post.visual_features or {},
        "engagement_velocity": post.engagement_velocity,
        "likes": post.likes,
        "views": post.views,
        "creator_id": post.creator_id,
        "creator_username": post.creator_username,
        "cluster_id": post.cluster_id,
        "processed": post.processed,
        "published_at": post.published_at.isoformat() if post.published_at else None,
    }


class ClusterAdminService:
    """Query clusters and apply admin moderation actions."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    def _get(self, db, cluster_id: str) -> ClusterModel:
        cluster = db.get(ClusterModel, cluster_id)
        if cluster is None:
            raise ClusterNotFoundError(cluster_id)
        return cluster

    def list_clusters(
        self,
        status: str | None = None,
        media_type: str | None = None,
        approved: bool | None = None,
        sort: str = "trend_score",
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        """Paginated cluster list with filters.

        Args:
            status: Filter by lifecycle status
            media_type: Filter by media type
            approved: Filter by approval flag
            sort: "trend_score" or "recent"
            page: 1-based page number
            limit: Page size

        Returns:
            Dict with clusters, total, page and total_pages
        """
        db = self.session_factory()
        try:
            query = db.query(ClusterModel)
            if status:
                query = query.filter(ClusterModel.status == status)
            if media_type:
                query = query.filter(ClusterModel.media_type == media_type)
            if approved is not None:
                query = query.filter(ClusterModel.is_approved.is_(approved))

            total = query.count()
            order = SORT_FIELDS.get(sort, SORT_FIELDS["trend_score"])
            rows = query.order_by(*order, ClusterModel.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

            return {
                "clusters": [cluster_to_dict(c) for c in rows],
                "total": total,
                "page": page,
                "total_pages": -(-total // limit) if limit else 0,
            }
        finally:
            db.close()

    def list_by_status(self, statuses: list[str], media_type: str | None = None, limit: int = 10) -> list[dict]:
        """Approved clusters in the given statuses, highest score first."""
        db = self.session_factory()
        try:
            query = db.query(ClusterModel).filter(
                ClusterModel.is_approved.is_(True),
                ClusterModel.status.in_(statuses),
            )
            if media_type:
                query = query.filter(ClusterModel.media_type == media_type)
            rows = query.order_by(ClusterModel.trend_score.desc(), ClusterModel.created_at.desc()).limit(limit).all()
            return [cluster_to_dict(c) for c in rows]
        finally:
            db.close()

    def list_pending(self, limit: int = 50) -> list[dict]:
        """Clusters neither approved nor rejected."""
        db = self.session_factory()
        try:
            rows = (
                db.query(ClusterModel)
                .filter(ClusterModel.is_approved.is_(False), ClusterModel.is_rejected.is_(False))
                .order_by(ClusterModel.trend_score.desc())
                .limit(limit)
                .all()
            )
            return [cluster_to_dict(c) for c in rows]
        finally:
            db.close()

    def get_cluster(self, cluster_id: str) -> dict:
        """Single cluster with its member posts.

        Raises:
            ClusterNotFoundError: If the cluster does not exist
        """
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            posts = db.query(PostModel).filter(PostModel.id.in_(cluster.post_ids or [])).all()
            by_id = {post.id: post for post in posts}
            result = cluster_to_dict(cluster)
            result["posts"] = [post_to_dict(by_id[pid]) for pid in cluster.post_ids or [] if pid in by_id]
            return result
        finally:
            db.close()

    def get_cluster_posts(self, cluster_id: str, page: int = 1, limit: int = 20) -> dict:
        """Member posts ordered by engagement velocity.

        Raises:
            ClusterNotFoundError: If the cluster does not exist
        """
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            query = db.query(PostModel).filter(PostModel.id.in_(cluster.post_ids or []))
            total = query.count()
            rows = (
                query.order_by(PostModel.engagement_velocity.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
            return {
                "posts": [post_to_dict(p) for p in rows],
                "total": total,
                "page": page,
                "total_pages": -(-total // limit) if limit else 0,
            }
        finally:
            db.close()

    def get_stats(self) -> dict:
        """Counts by status, media type and platform."""
        db = self.session_factory()
        try:
            by_status = dict(
                db.query(ClusterModel.status, func.count(ClusterModel.id)).group_by(ClusterModel.status).all()
            )
            by_media = dict(
                db.query(ClusterModel.media_type, func.count(ClusterModel.id)).group_by(ClusterModel.media_type).all()
            )

            platform_counts: dict[str, int] = {}
            for (platforms,) in db.query(ClusterModel.platforms).all():
                for platform in platforms or []:
                    platform_counts[platform] = platform_counts.get(platform, 0) + 1
            distribution = sorted(platform_counts.items(), key=lambda item: item[1], reverse=True)[:10]

            return {
                "totals": {
                    "clusters": sum(by_status.values()),
                    "viral": by_status.get(ClusterStatus.VIRAL.value, 0),
                    "trending": by_status.get(ClusterStatus.TRENDING.value, 0),
                    "emerging": by_status.get(ClusterStatus.EMERGING.value, 0),
                },
                "by_media_type": {
                    "image": by_media.get("image", 0),
                    "video": by_media.get("video", 0),
                },
                "platform_distribution": [{"platform": p, "count": c} for p, c in distribution],
            }
        finally:
            db.close()

    def approve(self, cluster_id: str) -> dict:
        """Approve a cluster, clearing any rejection."""
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            cluster.is_approved = True
            cluster.approved_at = datetime.utcnow()
            cluster.is_rejected = False
            cluster.rejection_reason = None
            db.commit()
            logger.info(f"Cluster {cluster_id} approved")
            return cluster_to_dict(cluster)
        finally:
            db.close()

    def reject(self, cluster_id: str, reason: str | None = None) -> dict:
        """Reject a cluster and withdraw approval."""
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            cluster.is_rejected = True
            cluster.rejection_reason = reason or "No reason provided"
            cluster.is_approved = False
            db.commit()
            logger.info(f"Cluster {cluster_id} rejected: {cluster.rejection_reason}")
            return cluster_to_dict(cluster)
        finally:
            db.close()

    def update(
        self,
        cluster_id: str,
        name: str | None = None,
        generated_prompt: str | None = None,
        status: str | None = None,
    ) -> dict:
        """Edit name, prompt text or status.

        This is the only place a cluster can be marked ``declining``.
        """
        if status is not None:
            status = ClusterStatus(status).value

        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            if name:
                cluster.name = name
            if generated_prompt:
                cluster.generated_prompt = generated_prompt
            if status:
                cluster.status = status
            db.commit()
            return cluster_to_dict(cluster)
        finally:
            db.close()

    def delete(self, cluster_id: str) -> None:
        """Delete a cluster and release its posts for re-clustering."""
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            db.query(PostModel).filter(PostModel.cluster_id == cluster_id).update(
                {PostModel.cluster_id: None, PostModel.processed: False},
                synchronize_session=False,
            )
            db.delete(cluster)
            db.commit()
            logger.info(f"Cluster {cluster_id} deleted")
        finally:
            db.close()

    def publish(self, cluster_id: str) -> dict:
        """Publish one approved cluster as a prompt.

        Raises:
            ClusterNotFoundError: If the cluster does not exist
            PublishError: If the cluster is not approved or already published
        """
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            if not cluster.is_approved:
                raise PublishError("Cluster must be approved before publishing")
            if cluster.published_prompt_id:
                raise PublishError("Cluster already published")

            prompt = build_prompt_record(db, cluster)
            db.add(prompt)
            db.flush()
            cluster.published_prompt_id = prompt.id
            db.commit()
            logger.info(f"Cluster {cluster_id} published as prompt {prompt.id}")
            return {"prompt_id": prompt.id, "cluster": cluster_to_dict(cluster)}
        finally:
            db.close()

    def prompt_variations(self, cluster_id: str, count: int = 3, tool: str | None = None) -> dict:
        """Alternative prompts for a cluster plus a matching negative prompt.

        Raises:
            ClusterNotFoundError: If the cluster does not exist
        """
        db = self.session_factory()
        try:
            cluster = self._get(db, cluster_id)
            features = VisualFeatures(**(cluster.visual_features or {}))
            variations = PromptBuilder().generate_variations(features, cluster.media_type, count)
        finally:
            db.close()

        texts = [v.enhanced_version for v in variations]
        if tool:
            texts = [enhance_for_ai_tool(text, tool) for text in texts]

        return {
            "cluster_id": cluster_id,
            "prompts": texts,
            "negative_prompt": generate_negative_prompt(features.style[0] if features.style else None),
        }
