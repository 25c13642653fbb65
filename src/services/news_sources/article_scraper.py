"""
Article Scraper
Extracts the title and readable body text of a single article URL
"""

from typing import Any, Dict

import structlog
from bs4 import BeautifulSoup

from ...utils.string_utils import clean_text
from .base import NewsSourceAdapter

logger = structlog.get_logger(__name__)

BOILERPLATE_SELECTORS = [
    'script', 'style', 'nav', 'header', 'footer', 'aside',
    '.sidebar', '.menu', '.navigation', '.ads', '.advertisement',
    '.social-share', '.comments',
]

CONTENT_SELECTORS = [
    'article',
    '[role="main"]',
    '.post-content',
    '.article-content',
    '.article-body',
    '.entry-content',
    '.post-body',
    '.content-body',
    'main article',
    'main',
    '.content',
]

MIN_SELECTOR_TEXT = 200
MIN_PARAGRAPH_LENGTH = 30
BODY_FALLBACK_LIMIT = 5000
MAX_CONTENT_LENGTH = 8000


class ArticleScraper(NewsSourceAdapter):
    def __init__(self, timeout: int = 8):
        super().__init__(timeout=timeout)
        self.session.headers.update(self.browser_headers())

    def scrape(self, url: str) -> Dict[str, Any]:
        response = self.fetch(url)
        result = self.extract(response.text)
        result["url"] = url
        logger.info("article_scraped", url=url, content_length=len(result["content"]))
        return result

    def extract(self, html: str) -> Dict[str, Any]:
        soup = BeautifulSoup(html, 'html.parser')
        title = self._extract_title(soup)

        for selector in BOILERPLATE_SELECTORS:
            for element in soup.select(selector):
                element.decompose()

        content = self._extract_content(soup)
        return {"title": title, "content": content[:MAX_CONTENT_LENGTH]}

    @staticmethod
    def _extract_title(soup: BeautifulSoup) -> str:
        if soup.title and soup.title.get_text(strip=True):
            return soup.title.get_text(strip=True)

        h1 = soup.find('h1')
        if h1 and h1.get_text(strip=True):
            return h1.get_text(strip=True)

        og_title = soup.find('meta', property='og:title')
        if og_title and og_title.get('content'):
            return og_title['content'].strip()

        return 'Untitled'

    @staticmethod
    def _extract_content(soup: BeautifulSoup) -> str:
        for selector in CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if not element or len(element.get_text(strip=True)) <= MIN_SELECTOR_TEXT:
                continue

            blocks = [
                clean_text(node.get_text(' '))
                for node in element.find_all(['p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li'])
            ]
            blocks = [b for b in blocks if b]
            if blocks:
                return "\n\n".join(blocks)

        body = soup.body or soup
        paragraphs = [clean_text(p.get_text(' ')) for p in body.find_all('p')]
        paragraphs = [p for p in paragraphs if len(p) > MIN_PARAGRAPH_LENGTH]
        if paragraphs:
            return "\n\n".join(paragraphs)

        return clean_text(body.get_text(' '))[:BODY_FALLBACK_LIMIT]
