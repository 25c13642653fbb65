import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from ..config import get_settings
from ..exceptions import LLMServiceError, ValidationError
from ..models.enums import SourceType
from ..models.source import Source
from ..models.user import User
from ..repositories.news_item_repository import NewsItemRepository
from ..repositories.source_repository import SourceRepository
from .ai_content_service import AIContentService
from .news_sources.base import CollectedArticle
from .news_sources.browser_scraper import BrowserScraper
from .news_sources.listing_scraper import ListingScraper
from .news_sources.rss_reader import RSSReader
from .news_sources.youtube import YouTubeAdapter

logger = structlog.get_logger(__name__)

THREADS_COLLECT_LIMIT = 20
THREADS_TITLE_LENGTH = 100


def parse_date_text(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def threads_post_article(post: Dict[str, Any]) -> CollectedArticle:
    """A scraped profile post as a collected article titled by its first line"""
    content = post.get("content") or ""
    first_line = content.strip().split("\n")[0]
    title = first_line[:THREADS_TITLE_LENGTH] if first_line else f"Threads post by {post['author']}"
    return CollectedArticle(
        title=title,
        url=post["post_url"],
        description=content,
        date_text=post.get("timestamp"),
        media_urls=list(post.get("media_urls") or []),
    )


class SourceCollectionService:
    """Pulls new articles for a source and stores them as news items"""

    def __init__(
        self,
        db: Session,
        ai_service: Optional[AIContentService] = None,
        rss_reader: Optional[RSSReader] = None,
        listing_scraper: Optional[ListingScraper] = None,
        youtube: Optional[YouTubeAdapter] = None,
        browser_scraper: Optional[BrowserScraper] = None,
    ):
        self.sources = SourceRepository(db)
        self.news_items = NewsItemRepository(db)
        self.ai_service = ai_service
        settings = get_settings()
        self.rss_reader = rss_reader or RSSReader(timeout=settings.rss_timeout_seconds)
        self.listing_scraper = listing_scraper or ListingScraper(timeout=settings.source_scrape_timeout_seconds)
        self.youtube = youtube or YouTubeAdapter()
        self.browser_scraper = browser_scraper

    def fetch_articles(self, source: Source) -> List[CollectedArticle]:
        if source.type == SourceType.BLOG.value:
            return self.listing_scraper.collect(source.website_url, source.scrape_config)

        if source.type == SourceType.YOUTUBE.value and not source.rss_url:
            return self.youtube.collect(source.website_url)

        if source.rss_url:
            return self.rss_reader.collect(source.rss_url)

        if source.type == SourceType.RSS.value:
            raise ValidationError("RSS source has no feed URL")
        raise ValidationError(f"Collection is not supported for {source.type} sources without a feed")

    async def fetch_threads_profile(self, source: Source) -> List[CollectedArticle]:
        if not self.browser_scraper:
            raise ValidationError("Collection is not supported for threads sources without a feed")
        profile = await self.browser_scraper.scrape_threads_profile(source.website_url, limit=THREADS_COLLECT_LIMIT)
        return [threads_post_article(post) for post in profile["posts"]]

    async def collect(self, source: Source, user: User) -> Dict[str, Any]:
        if source.type == SourceType.THREADS.value and not source.rss_url:
            articles = await self.fetch_threads_profile(source)
        else:
            loop = asyncio.get_running_loop()
            articles = await loop.run_in_executor(None, self.fetch_articles, source)

        known_urls = self.news_items.get_urls_by_user(user.user_id)
        new_fields = []
        for article in articles:
            if article.url in known_urls:
                continue
            known_urls.add(article.url)

            fields = article.to_news_item_fields(source.id)
            if fields["published_at"] is None:
                fields["published_at"] = parse_date_text(article.date_text)
            fields["priority"] = source.priority
            new_fields.append(fields)

        created = self.news_items.create_many(user.user_id, new_fields)

        summarized = 0
        if user.auto_summarize and self.ai_service:
            for item in created:
                try:
                    summary = await self.ai_service.quick_summary(item.title, item.original_content)
                except LLMServiceError as e:
                    logger.warning("auto_summary_failed", news_item_id=item.id, error=str(e))
                    continue
                self.news_items.update(item, quick_summary=summary)
                summarized += 1

        self.sources.mark_fetched(source)
        logger.info(
            "source_collected",
            source_id=source.id,
            source_type=source.type,
            fetched=len(articles),
            created=len(created),
            summarized=summarized
        )
        return {
            "source_id": source.id,
            "fetched": len(articles),
            "created": len(created),
            "summarized": summarized,
        }
