"""Base scraper class with common functionality."""

import logging
import random
import time
from abc import ABC, abstractmethod
from copy import deepcopy

import httpx
import yaml

from data_models.post import Platform, RawPost

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "global_settings": {
        "request_timeout": 30,
        "retry_attempts": 3,
        "retry_backoff": 2,
    },
    "user_agents": {
        "default": "viral-prompt-scraper/1.0",
    },
    "delays": {
        "between_requests": {"min": 1, "max": 2},
    },
}


class SourceFetchError(Exception):
    """A content source could not be fetched."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source} fetch error: {message}")
        self.source = source


class BaseScraper(ABC):
    """Abstract base class for all content sources."""

    source_name: str = "base"
    platform: Platform | None = None

    def __init__(
        self,
        config_path: str = "configs/scraping.yaml",
        config: dict | None = None,
        client: httpx.Client | None = None,
    ):
        """Initialize the scraper with configuration.

        Args:
            config_path: Path to scraping configuration YAML
            config: Already loaded configuration, skips reading the file
            client: Preconfigured HTTP client (tests pass a mock transport)
        """
        self.config = config if config is not None else self._load_config(config_path)
        self.client = client or self._create_client()
        self._request_count = 0
        self._last_request_time: float | None = None

    def _load_config(self, config_path: str) -> dict:
        """Load scraping configuration."""
        try:
            with open(config_path, "r") as f:
                return yaml.safe_load(f) or deepcopy(DEFAULT_CONFIG)
        except FileNotFoundError:
            logger.warning(f"Config not found at {config_path}, using defaults")
            return deepcopy(DEFAULT_CONFIG)

    def _settings(self) -> dict:
        return self.config.get("global_settings", {})

    def source_config(self) -> dict:
        """Per-source section of the config (keyed by source_name)."""
        return self.config.get(self.source_name, {}) or {}

    def _create_client(self) -> httpx.Client:
        """Create HTTP client with configured settings."""
        timeout = self._settings().get("request_timeout", 30)
        user_agent = self.config.get("user_agents", {}).get("default", "viral-prompt-scraper/1.0")

        return httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )

    def _get_delay(self) -> float:
        """Get random delay between requests."""
        delays = self.config.get("delays", {}).get("between_requests", {"min": 1, "max": 2})
        return random.uniform(delays.get("min", 1), delays.get("max", 2))

    def _wait_between_requests(self) -> None:
        """Wait appropriate time between requests."""
        if self._last_request_time is not None:
            elapsed = time.time() - self._last_request_time
            delay = self._get_delay()
            if elapsed < delay:
                time.sleep(delay - elapsed)
        self._last_request_time = time.time()

    def fetch(self, url: str, **kwargs) -> httpx.Response | None:
        """Fetch URL with rate limiting and retry logic.

        Args:
            url: URL to fetch
            **kwargs: Additional arguments for httpx

        Returns:
            Response object or None if failed
        """
        self._wait_between_requests()

        retry_attempts = self._settings().get("retry_attempts", 3)
        retry_backoff = self._settings().get("retry_backoff", 2)

        for attempt in range(retry_attempts):
            try:
                response = self.client.get(url, **kwargs)
                response.raise_for_status()
                self._request_count += 1
                return response

            except httpx.HTTPStatusError as e:
                logger.warning(f"HTTP error {e.response.status_code} for {url}")
                if e.response.status_code == 429:  # Rate limited
                    wait_time = (retry_backoff ** attempt) * 10
                    logger.info(f"Rate limited, waiting {wait_time}s")
                    time.sleep(wait_time)
                elif e.response.status_code >= 500:
                    wait_time = retry_backoff ** attempt
                    time.sleep(wait_time)
                else:
                    return None

            except httpx.RequestError as e:
                logger.error(f"Request error for {url}: {e}")
                wait_time = retry_backoff ** attempt
                time.sleep(wait_time)

        logger.error(f"Failed to fetch {url} after {retry_attempts} attempts")
        return None

    def fetch_json(self, url: str, **kwargs) -> dict:
        """Fetch a JSON document.

        Raises:
            SourceFetchError: If the request fails or the body is not JSON
        """
        response = self.fetch(url, **kwargs)
        if response is None:
            raise SourceFetchError(self.source_name, f"request to {url} failed")

        try:
            return response.json()
        except ValueError as e:
            raise SourceFetchError(self.source_name, f"invalid JSON from {url}: {e}") from e

    @abstractmethod
    def scrape(self) -> list[RawPost]:
        """Scrape content from the source.

        Returns:
            List of RawPost objects

        Raises:
            SourceFetchError: If nothing could be fetched from the source
        """
        pass

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
