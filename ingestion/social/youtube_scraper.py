"""YouTube scraper for AI-generated video content via the YouTube Data API v3."""

import logging
import os
from datetime import datetime, timedelta, timezone

import numpy as np

from data_models.post import MediaType, Platform, RawPost
from ingestion.base_scraper import BaseScraper, SourceFetchError

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"


def _parse_published(published_at: str | None) -> datetime | None:
    if not published_at:
        return None
    parsed = datetime.fromisoformat(published_at.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_youtube_velocity(
    views: int,
    likes: int,
    comments: int,
    published_at: datetime | None,
    now: datetime | None = None,
) -> float:
    """Engagement per hour on a 0-100 log scale.

    Videos younger than an hour (or without a publish date) score 0.

    Args:
        views: View count
        likes: Like count
        comments: Comment count
        published_at: Timezone-aware publish time
        now: Current time, defaults to utcnow

    Returns:
        Velocity between 0 and 100
    """
    if published_at is None:
        return 0.0
    now = now or datetime.now(timezone.utc)
    age_hours = (now - published_at).total_seconds() / 3600
    if age_hours < 1:
        return 0.0

    engagements = (views or 0) + (likes or 0) * 5 + (comments or 0) * 10
    return float(min(100.0, np.log10(engagements / age_hours + 1) * 20))


class YouTubeScraper(BaseScraper):
    """Scraper for recent AI videos and shorts."""

    source_name = "youtube"
    platform = Platform.YOUTUBE

    DEFAULT_QUERIES = [
        "ai video generation",
        "ai art",
        "midjourney",
        "stable diffusion",
        "runway gen",
        "pika labs",
        "sora ai",
        "ai animation",
        "ai shorts",
        "text to video ai",
        "dall-e",
        "ai generated",
    ]

    def __init__(
        self,
        config_path: str = "configs/scraping.yaml",
        api_key: str | None = None,
        search_queries: list[str] | None = None,
        max_results: int | None = None,
        config: dict | None = None,
        client=None,
    ):
        """Initialize YouTube scraper.

        Args:
            config_path: Path to scraping config
            api_key: YouTube Data API key (YOUTUBE_API_KEY if None)
            search_queries: Search queries to use (config or defaults if None)
            max_results: Result budget per pass, spread across queries
            config: Already loaded configuration
            client: Preconfigured HTTP client
        """
        super().__init__(config_path, config=config, client=client)
        source_config = self.source_config()
        self.api_key = api_key or os.getenv("YOUTUBE_API_KEY", "")
        self.search_queries = list(search_queries or source_config.get("queries") or self.DEFAULT_QUERIES)
        self.max_results = max_results or source_config.get("max_results", 50)
        self.days_back = source_config.get("days_back", 7)

    def _search(self, query: str, shorts: bool = False) -> list[str]:
        """Search for recent videos and return their ids."""
        per_query = max(1, -(-self.max_results // len(self.search_queries)))
        published_after = datetime.now(timezone.utc) - timedelta(days=self.days_back)

        params = {
            "key": self.api_key,
            "q": f"{query} #shorts" if shorts else query,
            "part": "snippet",
            "type": "video",
            "maxResults": per_query,
            "order": "viewCount",
            "publishedAfter": published_after.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        if shorts:
            params["videoDuration"] = "short"
        else:
            params["relevanceLanguage"] = "en"
            params["videoDefinition"] = "high"

        data = self.fetch_json(f"{API_BASE}/search", params=params)
        return [item.get("id", {}).get("videoId") for item in data.get("items", []) if item.get("id", {}).get("videoId")]

    def _video_details(self, video_ids: list[str]) -> list[dict]:
        data = self.fetch_json(
            f"{API_BASE}/videos",
            params={"key": self.api_key, "id": ",".join(video_ids), "part": "snippet,statistics,contentDetails"},
        )
        return data.get("items", [])

    def _video_to_raw(self, video: dict, now: datetime | None = None) -> RawPost:
        """Convert a videos.list item to RawPost."""
        snippet = video.get("snippet", {})
        stats = video.get("statistics", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url")

        views = int(stats.get("viewCount", 0) or 0)
        likes = int(stats.get("likeCount", 0) or 0)
        comments = int(stats.get("commentCount", 0) or 0)
        published = _parse_published(snippet.get("publishedAt"))
        watch_url = f"https://youtube.com/watch?v={video['id']}"

        return RawPost(
            platform=self.platform,
            source_id=video["id"],
            source_url=watch_url,
            media_type=MediaType.VIDEO,
            media_url=watch_url,
            thumbnail_url=thumbnail,
            title=snippet.get("title"),
            caption=snippet.get("description") or "",
            hashtags=snippet.get("tags") or [],
            engagement_velocity=calculate_youtube_velocity(views, likes, comments, published, now),
            likes=likes,
            views=views,
            comments=comments,
            creator_id=snippet.get("channelId") or "unknown",
            creator_username=snippet.get("channelTitle"),
            published_at=published.replace(tzinfo=None) if published else None,
        )

    def _scrape_pass(self, shorts: bool, videos: dict[str, dict]) -> int:
        """Run every query once, collecting details into ``videos``.

        Returns:
            Number of queries that failed
        """
        failures = 0
        for query in self.search_queries:
            try:
                video_ids = self._search(query, shorts=shorts)
                if not video_ids:
                    continue
                for video in self._video_details(video_ids):
                    videos[video["id"]] = video
            except SourceFetchError as e:
                logger.error(f"Error fetching YouTube {'shorts' if shorts else 'videos'} for '{query}': {e}")
                failures += 1
        return failures

    def scrape(self) -> list[RawPost]:
        """Scrape recent AI videos and shorts.

        Returns:
            RawPost objects, one per distinct video

        Raises:
            SourceFetchError: If no API key is set or every query failed
        """
        if not self.api_key:
            raise SourceFetchError(self.source_name, "YOUTUBE_API_KEY is not set")

        videos: dict[str, dict] = {}
        failures = self._scrape_pass(shorts=False, videos=videos)
        failures += self._scrape_pass(shorts=True, videos=videos)

        if failures == 2 * len(self.search_queries):
            raise SourceFetchError(self.source_name, "all search queries failed")

        now = datetime.now(timezone.utc)
        items = [self._video_to_raw(video, now) for video in videos.values()]

        logger.info(f"Scraped {len(items)} videos from YouTube")
        return items


def scrape_youtube() -> list[RawPost]:
    """Convenience function to run the YouTube scraper.

    Returns:
        Scraped RawPost objects
    """
    with YouTubeScraper() as scraper:
        return scraper.scrape()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    for item in scrape_youtube():
        print(item.platform, item.source_id, item.title)
