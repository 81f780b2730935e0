"""Social media content sources for PromptPulse."""

from ingestion.social.reddit_scraper import RedditScraper, calculate_reddit_velocity, scrape_reddit
from ingestion.social.youtube_scraper import YouTubeScraper, calculate_youtube_velocity, scrape_youtube

__all__ = [
    "RedditScraper",
    "calculate_reddit_velocity",
    "scrape_reddit",
    "YouTubeScraper",
    "calculate_youtube_velocity",
    "scrape_youtube",
]
