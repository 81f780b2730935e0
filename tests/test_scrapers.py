"""Tests for the Reddit and YouTube sources using a mocked HTTP transport."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from ingestion.base_scraper import SourceFetchError
from ingestion.social.reddit_scraper import RedditScraper, calculate_reddit_velocity
from ingestion.social.youtube_scraper import YouTubeScraper, calculate_youtube_velocity

FAST_CONFIG = {
    "global_settings": {"request_timeout": 5, "retry_attempts": 1, "retry_backoff": 1},
    "delays": {"between_requests": {"min": 0, "max": 0}},
}


def client_for(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# --------------------------------------------------------------------------
# Velocity
# --------------------------------------------------------------------------

def test_reddit_velocity():
    now = 1_700_000_000
    created = now - 10 * 3600

    assert calculate_reddit_velocity(100, 10, created, now) == pytest.approx(30.103, abs=1e-3)
    assert calculate_reddit_velocity(100, 10, now - 1800, now) == 0.0
    assert calculate_reddit_velocity(10**9, 0, created, now) == 100.0


def test_youtube_velocity():
    now = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    published = now - timedelta(hours=10)

    assert calculate_youtube_velocity(1000, 10, 5, published, now) == pytest.approx(40.906, abs=1e-3)
    assert calculate_youtube_velocity(1000, 10, 5, now - timedelta(minutes=30), now) == 0.0
    assert calculate_youtube_velocity(1000, 10, 5, None, now) == 0.0


# --------------------------------------------------------------------------
# Reddit
# --------------------------------------------------------------------------

def reddit_listing(*posts) -> dict:
    return {"data": {"children": [{"data": post} for post in posts]}}


def reddit_post(post_id: str, score: int, **extra) -> dict:
    post = {
        "id": post_id,
        "title": f"Post {post_id}",
        "selftext": "",
        "score": score,
        "num_comments": 3,
        "created_utc": 1_700_000_000,
        "permalink": f"/r/aiArt/comments/{post_id}/",
        "author": "artist",
        "thumbnail": "https://thumbs.example/x.jpg",
        "url": f"https://i.redd.it/{post_id}.png",
    }
    post.update(extra)
    return post


def test_reddit_detect_media():
    video = {"is_video": True, "media": {"reddit_video": {"fallback_url": "https://v.redd.it/a/720.mp4"}}}
    gallery = {"is_gallery": True, "media_metadata": {"x": {"s": {"u": "https://preview.redd.it/a.jpg?a=1&amp;b=2"}}}}

    assert RedditScraper.detect_media(video) == ("video", "https://v.redd.it/a/720.mp4")
    assert RedditScraper.detect_media({"url": "https://i.redd.it/a.JPG"})[0] == "image"
    assert RedditScraper.detect_media(gallery) == ("image", "https://preview.redd.it/a.jpg?a=1&b=2")
    assert RedditScraper.detect_media({"url": "https://reddit.com/r/x/comments/1"}) == (None, None)


def test_reddit_scrape_dedupes_sorts_and_drops_text_posts():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if "/r/first/" in request.url.path:
            return httpx.Response(200, json=reddit_listing(reddit_post("a", 10), reddit_post("b", 50)))
        return httpx.Response(
            200,
            json=reddit_listing(
                reddit_post("b", 50),
                reddit_post("c", 30, url="https://reddit.com/r/x/comments/c", post_hint="self"),
            ),
        )

    scraper = RedditScraper(subreddits=["first", "second"], limit=4, config=FAST_CONFIG, client=client_for(handler))
    items = scraper.scrape()

    assert [item.source_id for item in items] == ["b", "a"]
    assert items[0].platform == "reddit"
    assert items[0].media_type == "image"
    assert items[0].source_url == "https://reddit.com/r/aiArt/comments/b/"
    assert requests[0].url.params["limit"] == "2"
    assert requests[0].url.params["t"] == "week"


def test_reddit_skips_failed_subreddit():
    def handler(request: httpx.Request) -> httpx.Response:
        if "/r/broken/" in request.url.path:
            return httpx.Response(404)
        return httpx.Response(200, json=reddit_listing(reddit_post("a", 10)))

    scraper = RedditScraper(subreddits=["broken", "ok"], config=FAST_CONFIG, client=client_for(handler))

    assert [item.source_id for item in scraper.scrape()] == ["a"]


def test_reddit_raises_when_every_subreddit_fails():
    scraper = RedditScraper(
        subreddits=["one", "two"],
        config=FAST_CONFIG,
        client=client_for(lambda request: httpx.Response(404)),
    )

    with pytest.raises(SourceFetchError, match="reddit fetch error"):
        scraper.scrape()


# --------------------------------------------------------------------------
# YouTube
# --------------------------------------------------------------------------

def youtube_video(video_id: str, published: str = "2024-01-01T00:00:00Z") -> dict:
    return {
        "id": video_id,
        "snippet": {
            "title": f"AI video {video_id}",
            "description": "Made with Sora",
            "publishedAt": published,
            "channelId": "chan-1",
            "channelTitle": "AI Channel",
            "tags": ["ai", "sora"],
            "thumbnails": {"high": {"url": f"https://i.ytimg.com/{video_id}.jpg"}},
        },
        "statistics": {"viewCount": "1000", "likeCount": "10", "commentCount": "5"},
    }


def test_youtube_requires_api_key(monkeypatch):
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)
    scraper = YouTubeScraper(config=FAST_CONFIG, client=client_for(lambda request: httpx.Response(500)))

    with pytest.raises(SourceFetchError, match="YOUTUBE_API_KEY"):
        scraper.scrape()


def test_youtube_scrape_runs_video_and_shorts_passes():
    searches = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/search"):
            searches.append(dict(request.url.params))
            ids = ["v1"] if request.url.params.get("videoDuration") != "short" else ["v1", "s1"]
            return httpx.Response(200, json={"items": [{"id": {"videoId": i}} for i in ids]})
        ids = request.url.params["id"].split(",")
        return httpx.Response(200, json={"items": [youtube_video(i) for i in ids]})

    scraper = YouTubeScraper(
        api_key="key",
        search_queries=["ai art"],
        max_results=10,
        config=FAST_CONFIG,
        client=client_for(handler),
    )
    items = scraper.scrape()

    assert sorted(item.source_id for item in items) == ["s1", "v1"]
    assert searches[0]["q"] == "ai art"
    assert searches[0]["videoDefinition"] == "high"
    assert searches[1]["q"] == "ai art #shorts"
    assert searches[1]["videoDuration"] == "short"

    video = next(item for item in items if item.source_id == "v1")
    assert video.media_type == "video"
    assert video.source_url == "https://youtube.com/watch?v=v1"
    assert video.hashtags == ["ai", "sora"]
    assert video.views == 1000
    assert video.creator_id == "chan-1"
    assert video.published_at == datetime(2024, 1, 1)


def test_youtube_raises_when_every_query_fails():
    scraper = YouTubeScraper(
        api_key="key",
        search_queries=["a", "b"],
        config=FAST_CONFIG,
        client=client_for(lambda request: httpx.Response(403)),
    )

    with pytest.raises(SourceFetchError, match="all search queries failed"):
        scraper.scrape()
