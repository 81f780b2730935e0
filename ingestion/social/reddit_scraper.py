"""Reddit scraper using public JSON endpoints (no API key required)."""

import logging
import re
import time
from datetime import datetime, timezone

import numpy as np

from data_models.post import MediaType, Platform, RawPost
from ingestion.base_scraper import BaseScraper, SourceFetchError

logger = logging.getLogger(__name__)

IMAGE_URL_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)


def calculate_reddit_velocity(score: int, num_comments: int, created_utc: float, now: float | None = None) -> float:
    """Engagement per hour on a 0-100 log scale.

    Posts younger than an hour score 0.

    Args:
        score: Post score (upvotes)
        num_comments: Number of comments
        created_utc: Creation time as a Unix timestamp
        now: Current Unix timestamp, defaults to time.time()

    Returns:
        Velocity between 0 and 100
    """
    now = time.time() if now is None else now
    age_hours = (now - created_utc) / 3600
    if age_hours < 1:
        return 0.0

    engagements = max(0, (score or 0) + (num_comments or 0) * 5)
    return float(min(100.0, np.log10(engagements / age_hours + 1) * 25))


class RedditScraper(BaseScraper):
    """Scraper for top image and video posts in AI art subreddits."""

    source_name = "reddit"
    platform = Platform.REDDIT

    DEFAULT_SUBREDDITS = [
        "aiArt",
        "StableDiffusion",
        "midjourney",
        "AIVideo",
        "comfyui",
        "dalle2",
        "DefocusAI",
        "singularity",
        "artificial",
        "generativeAI",
        "LocalLLaMA",
        "FluxAI",
        "RunwayML",
        "Sora",
    ]

    BASE_URL = "https://www.reddit.com"

    def __init__(
        self,
        config_path: str = "configs/scraping.yaml",
        subreddits: list[str] | None = None,
        timeframe: str | None = None,
        limit: int | None = None,
        config: dict | None = None,
        client=None,
    ):
        """Initialize Reddit scraper.

        Args:
            config_path: Path to scraping config
            subreddits: Subreddits to scrape (config or defaults if None)
            timeframe: Top-posts window: hour, day, week or month
            limit: Total post budget spread across subreddits
            config: Already loaded configuration
            client: Preconfigured HTTP client
        """
        super().__init__(config_path, config=config, client=client)
        source_config = self.source_config()
        self.subreddits = list(subreddits or source_config.get("subreddits") or self.DEFAULT_SUBREDDITS)
        self.timeframe = timeframe or source_config.get("timeframe", "week")
        self.limit = limit or source_config.get("limit", 50)

    def _fetch_top_posts(self, subreddit: str, per_subreddit: int) -> list[dict]:
        """Fetch top posts from a subreddit.

        Args:
            subreddit: Subreddit name (without r/)
            per_subreddit: Number of posts to request

        Returns:
            List of post data dicts
        """
        data = self.fetch_json(
            f"{self.BASE_URL}/r/{subreddit}/top.json",
            params={"t": self.timeframe, "limit": per_subreddit, "raw_json": 1},
        )
        children = data.get("data", {}).get("children", [])
        return [child["data"] for child in children if "data" in child]

    @staticmethod
    def detect_media(post: dict) -> tuple[MediaType | None, str | None]:
        """Work out whether a post carries a video or an image.

        Returns:
            Tuple of (media type, media URL); (None, None) for text posts
        """
        reddit_video = ((post.get("media") or {}).get("reddit_video") or {}).get("fallback_url")
        if post.get("is_video") and reddit_video:
            return MediaType.VIDEO, reddit_video

        url = post.get("url") or ""
        if post.get("post_hint") == "image" or IMAGE_URL_PATTERN.search(url):
            return MediaType.IMAGE, url

        metadata = post.get("media_metadata")
        if post.get("is_gallery") and metadata:
            first = next(iter(metadata.values()), {}) or {}
            source_url = (first.get("s") or {}).get("u")
            return MediaType.IMAGE, source_url.replace("&amp;", "&") if source_url else None

        return None, None

    @staticmethod
    def _thumbnail(post: dict) -> str | None:
        thumbnail = post.get("thumbnail")
        if not thumbnail or thumbnail.startswith("self") or thumbnail in ("default", "nsfw"):
            return None
        return thumbnail

    def _post_to_raw(self, post: dict, now: float | None = None) -> RawPost | None:
        """Convert a Reddit post to RawPost, or None if it has no media."""
        media_type, media_url = self.detect_media(post)
        if media_type is None:
            return None

        created_utc = post.get("created_utc")
        published_at = None
        velocity = 0.0
        if created_utc:
            published_at = datetime.fromtimestamp(created_utc, tz=timezone.utc).replace(tzinfo=None)
            velocity = calculate_reddit_velocity(post.get("score", 0), post.get("num_comments", 0), created_utc, now)

        return RawPost(
            platform=self.platform,
            source_id=post["id"],
            source_url=f"https://reddit.com{post.get('permalink', '')}",
            media_type=media_type,
            media_url=media_url,
            thumbnail_url=self._thumbnail(post),
            title=post.get("title"),
            caption=post.get("selftext") or "",
            engagement_velocity=velocity,
            likes=post.get("score") or 0,
            comments=post.get("num_comments") or 0,
            creator_id=post.get("author") or "[deleted]",
            creator_username=post.get("author"),
            published_at=published_at,
        )

    def scrape(self) -> list[RawPost]:
        """Scrape top media posts from configured subreddits.

        Subreddits that fail are logged and skipped.

        Returns:
            RawPost objects sorted by score, highest first

        Raises:
            SourceFetchError: If every subreddit failed
        """
        per_subreddit = max(1, -(-self.limit // len(self.subreddits)))
        posts_by_id: dict[str, dict] = {}
        failures = []

        for subreddit in self.subreddits:
            logger.info(f"Fetching r/{subreddit} top ({self.timeframe})...")
            try:
                posts = self._fetch_top_posts(subreddit, per_subreddit)
            except SourceFetchError as e:
                logger.error(f"Error fetching r/{subreddit}: {e}")
                failures.append(subreddit)
                continue

            for post in posts:
                if post.get("id"):
                    posts_by_id[post["id"]] = post

        if self.subreddits and len(failures) == len(self.subreddits):
            raise SourceFetchError(self.source_name, f"all {len(failures)} subreddits failed")

        ranked = sorted(posts_by_id.values(), key=lambda p: p.get("score") or 0, reverse=True)
        now = time.time()
        items = [item for item in (self._post_to_raw(post, now) for post in ranked) if item is not None]

        logger.info(f"Scraped {len(items)} media posts from Reddit ({len(ranked)} total)")
        return items


def scrape_reddit() -> list[RawPost]:
    """Convenience function to run the Reddit scraper.

    Returns:
        Scraped RawPost objects
    """
    with RedditScraper() as scraper:
        return scraper.scrape()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    for item in scrape_reddit():
        print(item.platform, item.source_id, item.title)
