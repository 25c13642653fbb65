"""
Base class for news collectors
Shared HTTP session and the article shape every collector returns
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import requests
import structlog

from ...exceptions import ScrapeTimeoutError, ScrapingError

logger = structlog.get_logger(__name__)

DESKTOP_USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.6 Safari/605.1.15',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0',
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
]


@dataclass
class CollectedArticle:
    """Standardized article format for all collectors"""
    title: str
    url: str
    description: str = ""
    published_at: Optional[datetime] = None
    date_text: Optional[str] = None
    media_urls: List[str] = field(default_factory=list)

    def to_news_item_fields(self, source_id: str) -> dict:
        return {
            "source_id": source_id,
            "title": self.title,
            "url": self.url,
            "original_content": self.description,
            "published_at": self.published_at,
            "media_urls": list(self.media_urls),
        }


class NewsSourceAdapter:
    """Base adapter holding a requests session"""

    USER_AGENT = 'Mozilla/5.0 (compatible; AI-News-Dashboard/1.0)'

    def __init__(self, timeout: int = 10):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': self.USER_AGENT})

    @staticmethod
    def browser_headers() -> dict:
        return {
            'User-Agent': random.choice(DESKTOP_USER_AGENTS),
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9,ko;q=0.8',
            'Accept-Encoding': 'gzip, deflate',
            'Cache-Control': 'no-cache',
            'Upgrade-Insecure-Requests': '1',
        }

    def fetch(self, url: str, **kwargs) -> requests.Response:
        """GET with the adapter timeout, raising domain errors"""
        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response
        except requests.Timeout:
            logger.warning("fetch_timeout", url=url, timeout=self.timeout)
            raise ScrapeTimeoutError(f"Timed out fetching {url}")
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise ScrapingError(f"HTTP {status} fetching {url}")
        except requests.RequestException as e:
            raise ScrapingError(f"Failed to fetch {url}: {e}")
