import asyncio

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_browser_scraper
from ..schemas import (
    UrlRequest,
    ScrapeSourceRequest,
    SocialPreviewRequest,
    ScrapeResponse,
    ScrapeSourceResponse,
    SocialPreviewResponse,
    TweetResponse,
    ThreadsPostResponse,
    ThreadsProfileRequest,
    ThreadsProfileResponse,
)
from ....config import get_settings
from ....exceptions import (
    ExternalServiceError,
    ScrapeTimeoutError,
    ScrapingError,
    ValidationError,
)
from ....services.news_sources.article_scraper import ArticleScraper
from ....services.news_sources.browser_scraper import BrowserScraper
from ....services.news_sources.listing_scraper import ListingScraper
from ....services.news_sources.social_preview import SocialPreviewScraper

logger = structlog.get_logger(__name__)

router = APIRouter()

TIMEOUT_MESSAGE = "Request timeout - site took too long to respond"


def require_url(url):
    if not url:
        raise HTTPException(status_code=400, detail="URL is required")
    return url


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape_article(request: UrlRequest):
    url = require_url(request.url)
    scraper = ArticleScraper(timeout=get_settings().scrape_timeout_seconds)
    try:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, scraper.scrape, url)
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail=TIMEOUT_MESSAGE)
    except ScrapingError as e:
        logger.warning("article_scrape_failed", url=url, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to scrape URL")


@router.post("/scrape-source", response_model=ScrapeSourceResponse)
async def scrape_source(request: ScrapeSourceRequest):
    url = require_url(request.url)
    config = request.config.model_dump() if request.config else None
    scraper = ListingScraper(timeout=get_settings().source_scrape_timeout_seconds)
    try:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, scraper.scrape, url, config)
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail=TIMEOUT_MESSAGE)
    except ScrapingError as e:
        logger.warning("source_scrape_failed", url=url, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to scrape source")


@router.post("/scrape-social", response_model=SocialPreviewResponse)
async def scrape_social(request: SocialPreviewRequest):
    url = require_url(request.url)
    try:
        return await SocialPreviewScraper().preview(url, request.platform)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail=TIMEOUT_MESSAGE)
    except ScrapingError as e:
        logger.warning("social_preview_failed", url=url, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to scrape social content")


async def _browser_scrape(scrape, url: str, label: str):
    try:
        result = await scrape(url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail=TIMEOUT_MESSAGE)
    except ExternalServiceError as e:
        # not configured, or the remote browser could not be reached
        raise HTTPException(status_code=503, detail=str(e))

    if not result.get("content") and not result.get("media_urls"):
        raise HTTPException(status_code=404, detail=f"Could not extract {label} content")
    return result


@router.post("/scrape/twitter", response_model=TweetResponse)
async def scrape_twitter(
    request: UrlRequest,
    scraper: BrowserScraper = Depends(get_browser_scraper)
):
    url = require_url(request.url)
    return await _browser_scrape(scraper.scrape_tweet, url, "tweet")


@router.post("/scrape/threads", response_model=ThreadsPostResponse)
async def scrape_threads(
    request: UrlRequest,
    scraper: BrowserScraper = Depends(get_browser_scraper)
):
    url = require_url(request.url)
    return await _browser_scrape(scraper.scrape_threads_post, url, "Threads")


@router.post("/scrape/threads/profile", response_model=ThreadsProfileResponse)
async def scrape_threads_profile(
    request: ThreadsProfileRequest,
    scraper: BrowserScraper = Depends(get_browser_scraper)
):
    url = require_url(request.url)
    try:
        profile = await scraper.scrape_threads_profile(url, limit=request.limit)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail="Request timeout - Threads profile took too long to load")
    except ExternalServiceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not profile["posts"]:
        raise HTTPException(
            status_code=404,
            detail="No posts found. The profile may be private or have no public posts."
        )
    return profile
