"""
Listing page scraper for sources without a feed (company blogs, newsrooms)
"""

import random
import re
import time
from typing import Any, Dict, List, Optional

import structlog
from bs4 import BeautifulSoup

from ...utils.url_utils import resolve_url
from .base import NewsSourceAdapter, CollectedArticle

logger = structlog.get_logger(__name__)

MAX_ARTICLES = 20
MIN_TITLE_LENGTH = 5
FALLBACK_TITLE_RANGE = (10, 200)
DESCRIPTION_LENGTH = 300
ARTICLE_LINK_PATTERN = re.compile(r'(blog|news|post|article|announcement)', re.IGNORECASE)

DEFAULT_SCRAPE_CONFIGS = {
    'anthropic.com': {
        'article_selector': 'article, .post-card, [class*="NewsCard"], [class*="post"], a[href*="/news/"]',
        'title_selector': 'h2, h3, .title, [class*="title"]',
        'link_selector': 'a[href]',
        'description_selector': 'p, .description, .excerpt, [class*="description"]',
        'date_selector': 'time, .date, [class*="date"]',
    },
    'ai.meta.com': {
        'article_selector': '.blog-post, article, [class*="Card"], [class*="post"]',
        'title_selector': 'h2, h3, .title, [class*="title"]',
        'link_selector': 'a[href]',
        'description_selector': 'p, .excerpt',
        'date_selector': 'time, .date',
    },
}

GENERIC_SCRAPE_CONFIG = {
    'article_selector': 'article, .post, .card, [class*="article"], [class*="post"], [class*="card"], li > a',
    'title_selector': 'h1, h2, h3, .title, [class*="title"], [class*="heading"]',
    'link_selector': 'a[href]',
    'description_selector': 'p, .description, .excerpt, .summary',
    'date_selector': 'time, .date, [datetime]',
}


def get_config_for_url(url: str, custom_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    if custom_config:
        return custom_config
    for domain, config in DEFAULT_SCRAPE_CONFIGS.items():
        if domain in url:
            return config
    return GENERIC_SCRAPE_CONFIG


def _is_skipped_link(link: str) -> bool:
    return '#' in link or link.endswith('.pdf') or 'mailto:' in link


class ListingScraper(NewsSourceAdapter):
    def __init__(self, timeout: int = 10, delay_range=(0.5, 2.0)):
        super().__init__(timeout=timeout)
        self.delay_range = delay_range

    def scrape(self, url: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if self.delay_range:
            time.sleep(random.uniform(*self.delay_range))

        response = self.fetch(url, headers=self.browser_headers())
        articles = self.extract(response.text, url, get_config_for_url(url, config))

        logger.info("listing_scraped", url=url, articles=len(articles))
        return {
            "articles": [self._as_dict(a) for a in articles[:MAX_ARTICLES]],
            "count": len(articles),
            "url": url,
        }

    def collect(self, url: str, config: Optional[Dict[str, Any]] = None) -> List[CollectedArticle]:
        result = self.scrape(url, config)
        return [
            CollectedArticle(
                title=a["title"],
                url=a["link"],
                description=a.get("description") or "",
                date_text=a.get("pub_date"),
            )
            for a in result["articles"]
        ]

    def extract(self, html: str, page_url: str, config: Dict[str, Any]) -> List[Dict[str, Any]]:
        soup = BeautifulSoup(html, 'html.parser')
        seen = set()
        articles = []

        for element in soup.select(config['article_selector']):
            if element.name == 'a':
                link_el = element
            else:
                link_el = element.select_one(config.get('link_selector') or 'a[href]')
            href = link_el.get('href') if link_el else None
            if not href:
                continue

            link = resolve_url(page_url, href)
            if link in seen or _is_skipped_link(link):
                continue
            seen.add(link)

            title_el = element.select_one(config['title_selector'])
            if title_el:
                title = title_el.get_text(strip=True)
            elif element.name == 'a':
                title = element.get_text(strip=True)
            else:
                title = ''
            if len(title) < MIN_TITLE_LENGTH:
                continue

            article = {"title": title, "link": link}

            if config.get('description_selector'):
                desc_el = element.select_one(config['description_selector'])
                if desc_el and desc_el.get_text(strip=True):
                    article["description"] = desc_el.get_text(strip=True)[:DESCRIPTION_LENGTH]

            if config.get('date_selector'):
                date_el = element.select_one(config['date_selector'])
                if date_el:
                    pub_date = date_el.get('datetime') or date_el.get_text(strip=True)
                    if pub_date:
                        article["pub_date"] = pub_date

            articles.append(article)

        if not articles:
            articles = self._fallback_links(soup, page_url, seen)

        return articles

    @staticmethod
    def _fallback_links(soup: BeautifulSoup, page_url: str, seen: set) -> List[Dict[str, Any]]:
        articles = []
        low, high = FALLBACK_TITLE_RANGE
        for anchor in soup.select('a[href]'):
            href = anchor.get('href') or ''
            if not href or href.startswith('#') or 'mailto:' in href:
                continue

            link = resolve_url(page_url, href)
            if link in seen or not ARTICLE_LINK_PATTERN.search(link):
                continue
            seen.add(link)

            title = anchor.get_text(strip=True)
            if low <= len(title) <= high:
                articles.append({"title": title, "link": link})
        return articles

    @staticmethod
    def _as_dict(article: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "title": article["title"],
            "link": article["link"],
            "description": article.get("description"),
            "pub_date": article.get("pub_date"),
        }
