import asyncio

import structlog
from fastapi import APIRouter, HTTPException

from ..schemas import UrlRequest, RSSFeedResponse
from ....config import get_settings
from ....exceptions import ScrapingError
from ....services.news_sources.rss_reader import RSSReader

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/rss", response_model=RSSFeedResponse)
async def read_rss(request: UrlRequest):
    if not request.url:
        raise HTTPException(status_code=400, detail="URL is required")

    reader = RSSReader(timeout=get_settings().rss_timeout_seconds)
    try:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, reader.read, request.url)
    except ScrapingError as e:
        logger.warning("rss_request_failed", url=request.url, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to parse RSS feed")
