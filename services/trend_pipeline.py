"""Trend pipeline service - batch discovery, viral notifications and publishing."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from copy import deepcopy
from datetime import datetime

import yaml
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from data_models.cluster import ClusterStatus
from data_models.post import PostCreate, RawPost
from db.database import PersistenceError, SessionLocal
from db.models import ClusterModel, NotificationModel, PostModel, ProcessingJobModel, PromptModel
from ingestion.base_scraper import SourceFetchError
from ingestion.social.reddit_scraper import RedditScraper
from ingestion.social.youtube_scraper import YouTubeScraper
from processing.clustering import PostClusterer, TrendCluster
from processing.prompt_builder import PromptBuilder, generate_cluster_name
from processing.scoring import get_metrics_dict
from processing.signal_extractor import SignalExtractor

logger = logging.getLogger(__name__)

DEFAULT_PIPELINE_CONFIG = {
    "similarity_threshold": 0.72,
    "min_trend_score": 40,
    "max_posts_per_source": 50,
    "sources": ["youtube", "reddit"],
}

NOTIFICATION_TITLE = "🔥 New Viral Trend Detected!"
NOTIFICATION_FALLBACK_BODY = "A new viral prompt trend is emerging"


def load_pipeline_config(config_path: str = "configs/pipeline.yaml") -> dict:
    """Load pipeline configuration, falling back to defaults."""
    config = deepcopy(DEFAULT_PIPELINE_CONFIG)
    try:
        with open(config_path, "r") as f:
            config.update(yaml.safe_load(f) or {})
    except FileNotFoundError:
        logger.warning(f"Config not found at {config_path}, using defaults")
    return config


def build_prompt_record(db: Session, cluster: ClusterModel) -> PromptModel:
    """Build (but do not add) the published prompt for a cluster.

    Args:
        db: Open session, used to load the representative post
        cluster: Approved cluster

    Returns:
        Unsaved PromptModel
    """
    representative = db.get(PostModel, cluster.representative_post_id) if cluster.representative_post_id else None
    features = cluster.visual_features or {}
    metrics = cluster.metrics or {}
    subjects = features.get("subjects") or []
    styles = features.get("style") or []
    emotions = features.get("emotion") or []

    return PromptModel(
        text=cluster.generated_prompt,
        type=cluster.media_type,
        preview_url=(representative.thumbnail_url or representative.media_url) if representative else None,
        preview_type=cluster.media_type,
        platforms=list(cluster.platforms or []),
        ai_tools=[],
        tags=subjects[:5] + styles[:3],
        style=styles[0] if styles else None,
        emotion=emotions[0] if emotions else None,
        trend_score=cluster.trend_score,
        first_seen_at=cluster.created_at,
        cross_platform_count=metrics.get("platform_count", 0),
        creator_count=metrics.get("creator_count", 0),
        engagement_velocity=metrics.get("avg_engagement_velocity", 0),
        cluster_id=cluster.id,
        is_approved=True,
    )


class TrendPipeline:
    """Fetch content, cluster it and persist scored prompt trends."""

    def __init__(
        self,
        sources: list | None = None,
        session_factory=None,
        clusterer: PostClusterer | None = None,
        extractor: SignalExtractor | None = None,
        prompt_builder: PromptBuilder | None = None,
        config_path: str = "configs/pipeline.yaml",
        config: dict | None = None,
    ):
        """Initialize the pipeline.

        Args:
            sources: Content sources exposing ``source_name`` and ``scrape()``.
                Built from config on each run if None.
            session_factory: Callable returning a Session (SessionLocal if None)
            clusterer: Post clusterer (threshold from config if None)
            extractor: Signal extractor with the default vocabulary if None
            prompt_builder: Prompt builder for generated prompt text
            config_path: Path to pipeline config
            config: Already loaded config, skips reading the file
        """
        self.config = config if config is not None else load_pipeline_config(config_path)
        self.sources = sources
        self.session_factory = session_factory or SessionLocal
        self.clusterer = clusterer or PostClusterer(threshold=self.config["similarity_threshold"])
        self.extractor = extractor or SignalExtractor()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.min_trend_score = self.config["min_trend_score"]

    def _default_sources(self) -> list:
        """Build the configured sources; YouTube only when an API key is set."""
        limit = self.config["max_posts_per_source"]
        sources = []
        for name in self.config.get("sources", []):
            if name == "youtube":
                if os.getenv("YOUTUBE_API_KEY"):
                    sources.append(YouTubeScraper(max_results=limit))
                else:
                    logger.info("YOUTUBE_API_KEY not set, skipping YouTube")
            elif name == "reddit":
                sources.append(RedditScraper(limit=limit))
            else:
                logger.warning(f"Unknown source in config: {name}")
        return sources

    def fetch_all(self, sources: list) -> tuple[list[RawPost], list[str]]:
        """Fetch every source concurrently, each in its own failure boundary.

        Args:
            sources: Content sources

        Returns:
            Tuple of (raw items in source order, error messages)
        """
        items: list[RawPost] = []
        errors: list[str] = []
        if not sources:
            return items, errors

        with ThreadPoolExecutor(max_workers=len(sources)) as executor:
            futures = [(source, executor.submit(source.scrape)) for source in sources]

            for source, future in futures:
                name = getattr(source, "source_name", type(source).__name__)
                try:
                    fetched = future.result()
                    logger.info(f"Fetched {len(fetched)} items from {name}")
                    items.extend(fetched)
                except SourceFetchError as e:
                    logger.error(str(e))
                    errors.append(str(e))
                except Exception as e:
                    message = f"{name} fetch error: {e}"
                    logger.exception(message)
                    errors.append(message)

        return items, errors

    def to_post(self, raw: RawPost) -> PostCreate:
        """Extract signals from a raw item and map it to the canonical post."""
        signals = self.extractor.extract_from_fields(raw.title, raw.caption)
        visual = self.extractor.merge(raw.visual_hints, signals)

        data = raw.model_dump(exclude={"visual_hints"})
        data["hashtags"] = raw.hashtags or signals.hashtags
        return PostCreate(**data, visual_features=visual, text_signals=signals)

    def _upsert_post(self, db: Session, post: PostCreate) -> PostModel:
        """Insert or update a post by (platform, source_id).

        Never touches ``processed`` or ``cluster_id`` on an existing row.

        Raises:
            PersistenceError: If the write fails
        """
        data = post.model_dump()
        try:
            existing = (
                db.query(PostModel)
                .filter(PostModel.platform == post.platform, PostModel.source_id == post.source_id)
                .first()
            )
            if existing:
                for key, value in data.items():
                    setattr(existing, key, value)
                row = existing
            else:
                row = PostModel(**data)
                db.add(row)
            db.commit()
            return row
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"post {post.platform}:{post.source_id}", e) from e

    def save_posts(self, posts: list[PostCreate]) -> int:
        """Upsert posts, skipping records that fail.

        Returns:
            Number of posts written
        """
        db = self.session_factory()
        saved = 0
        try:
            for post in posts:
                try:
                    self._upsert_post(db, post)
                    saved += 1
                except PersistenceError as e:
                    logger.error(str(e))
        finally:
            db.close()

        logger.info(f"Saved {saved}/{len(posts)} posts")
        return saved

    def load_unprocessed(self) -> list[PostModel]:
        """All posts not yet assigned to a persisted cluster, in ingestion order."""
        db = self.session_factory()
        try:
            posts = (
                db.query(PostModel)
                .filter(PostModel.processed.is_(False))
                .order_by(PostModel.created_at, PostModel.platform, PostModel.source_id)
                .all()
            )
            db.expunge_all()
            return posts
        finally:
            db.close()

    def _persist_cluster(self, db: Session, cluster: TrendCluster) -> ClusterModel:
        """Write a cluster and mark its members processed.

        Raises:
            PersistenceError: If the write fails
        """
        post_ids = cluster.post_ids

        try:
            prompt = self.prompt_builder.generate_prompt(cluster.visual_features, cluster.media_type)
            name = generate_cluster_name(cluster.visual_features)
            row = ClusterModel(
                id=cluster.id,
                media_type=cluster.media_type,
                name=name,
                post_ids=post_ids,
                representative_post_id=cluster.representative.id,
                visual_features=cluster.visual_features.model_dump(),
                metrics=get_metrics_dict(cluster.metrics),
                platforms=cluster.platforms,
                trend_score=cluster.trend_score,
                status=cluster.status,
                generated_prompt=prompt.enhanced_version,
            )
            db.add(row)
            db.query(PostModel).filter(PostModel.id.in_(post_ids)).update(
                {PostModel.cluster_id: cluster.id, PostModel.processed: True},
                synchronize_session=False,
            )
            db.commit()
        except Exception as e:
            db.rollback()
            raise PersistenceError(f"cluster {cluster.id}", e) from e

        logger.info(f"Created cluster: {name} (Score: {cluster.trend_score}, Status: {cluster.status})")
        return row

    def save_clusters(self, clusters: list[TrendCluster]) -> int:
        """Persist clusters scoring at least ``min_trend_score``.

        Returns:
            Number of clusters written
        """
        db = self.session_factory()
        created = 0
        try:
            for cluster in clusters:
                if cluster.trend_score < self.min_trend_score:
                    continue
                try:
                    self._persist_cluster(db, cluster)
                    created += 1
                except PersistenceError as e:
                    logger.error(str(e))
        finally:
            db.close()
        return created

    def _start_job(self, job_type: str) -> str:
        db = self.session_factory()
        try:
            job = ProcessingJobModel(job_type=job_type, status="running", started_at=datetime.utcnow())
            db.add(job)
            db.commit()
            return job.id
        finally:
            db.close()

    def _finish_job(self, job_id: str, status: str, processed: int = 0, failed: int = 0,
                    error: str | None = None, metadata: dict | None = None) -> None:
        db = self.session_factory()
        try:
            job = db.get(ProcessingJobModel, job_id)
            if job:
                job.status = status
                job.completed_at = datetime.utcnow()
                job.items_processed = processed
                job.items_failed = failed
                job.error_message = error
                job.metadata_json = metadata or {}
                db.commit()
        finally:
            db.close()

    def run(self) -> dict:
        """Run one batch: fetch, extract, upsert, cluster, persist.

        Returns:
            Dict with posts_processed, clusters_created and errors
        """
        logger.info("Starting trend pipeline run...")
        job_id = self._start_job("trend_pipeline")

        owned_sources = self.sources is None
        sources = self._default_sources() if owned_sources else self.sources

        try:
            raw_items, errors = self.fetch_all(sources)
            posts = []
            for raw in raw_items:
                try:
                    posts.append(self.to_post(raw))
                except Exception as e:
                    message = f"{raw.platform}:{raw.source_id} extraction error: {e}"
                    logger.exception(message)
                    errors.append(message)
            saved = self.save_posts(posts)

            unprocessed = self.load_unprocessed()
            logger.info(f"Found {len(unprocessed)} posts to cluster")

            clusters = self.clusterer.cluster(unprocessed)
            created = self.save_clusters(clusters)

            summary = {
                "posts_processed": saved,
                "clusters_created": created,
                "errors": errors,
            }
            self._finish_job(
                job_id,
                "completed",
                processed=saved,
                failed=len(raw_items) - saved,
                error="; ".join(errors) or None,
                metadata={"clusters_found": len(clusters), **summary},
            )
            logger.info(f"Trend pipeline completed: {summary}")
            return summary

        except Exception as e:
            self._finish_job(job_id, "failed", error=str(e))
            logger.error(f"Trend pipeline failed: {e}")
            raise

        finally:
            if owned_sources:
                for source in sources:
                    source.close()

    def send_viral_notifications(self) -> dict:
        """Create one global notification per approved, un-notified viral cluster.

        Returns:
            Dict with the number of notifications sent
        """
        db = self.session_factory()
        sent = 0
        try:
            clusters = (
                db.query(ClusterModel)
                .filter(
                    ClusterModel.status == ClusterStatus.VIRAL.value,
                    ClusterModel.notification_sent.is_(False),
                    ClusterModel.is_approved.is_(True),
                )
                .all()
            )

            for cluster in clusters:
                try:
                    db.add(NotificationModel(
                        type="new_viral",
                        title=NOTIFICATION_TITLE,
                        body=cluster.name or NOTIFICATION_FALLBACK_BODY,
                        data={
                            "cluster_id": cluster.id,
                            "trend_score": cluster.trend_score,
                            "media_type": cluster.media_type,
                        },
                        is_global=True,
                    ))
                    cluster.notification_sent = True
                    cluster.notification_sent_at = datetime.utcnow()
                    db.commit()
                    sent += 1
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(str(PersistenceError(f"notification for cluster {cluster.id}", e)))
        finally:
            db.close()

        logger.info(f"Sent {sent} viral notifications")
        return {"sent": sent}

    def publish_approved_clusters(self) -> dict:
        """Publish every approved cluster that has no prompt yet.

        Returns:
            Dict with the number of prompts published
        """
        db = self.session_factory()
        published = 0
        try:
            clusters = (
                db.query(ClusterModel)
                .filter(ClusterModel.is_approved.is_(True), ClusterModel.published_prompt_id.is_(None))
                .all()
            )

            for cluster in clusters:
                try:
                    prompt = build_prompt_record(db, cluster)
                    db.add(prompt)
                    db.flush()
                    cluster.published_prompt_id = prompt.id
                    db.commit()
                    published += 1
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(str(PersistenceError(f"prompt for cluster {cluster.id}", e)))
        finally:
            db.close()

        logger.info(f"Published {published} clusters")
        return {"published": published}

    def run_weekly(self) -> dict:
        """Weekly job: batch run, then publish, then notify."""
        result = self.run()
        result.update(self.publish_approved_clusters())
        result.update(self.send_viral_notifications())
        return result


def run_trend_pipeline() -> dict:
    """Convenience function to run one batch with the default setup."""
    return TrendPipeline().run()


def send_viral_notifications() -> dict:
    """Convenience function to send pending viral notifications."""
    return TrendPipeline(sources=[]).send_viral_notifications()


def publish_approved_clusters() -> dict:
    """Convenience function to publish approved clusters."""
    return TrendPipeline(sources=[]).publish_approved_clusters()
