import asyncio

import structlog
from fastapi import APIRouter, HTTPException

from ..schemas import UrlRequest, YouTubeChannelRequest, YouTubeVideoResponse, YouTubeChannelResponse
from ....exceptions import NotFoundError, ScrapeTimeoutError, ScrapingError, ValidationError
from ....services.news_sources.youtube import YouTubeAdapter

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _run(fn, *args):
    try:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail="Request timeout - site took too long to respond")
    except ScrapingError as e:
        logger.warning("youtube_request_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch YouTube data")


@router.post("/youtube", response_model=YouTubeVideoResponse)
async def get_video(request: UrlRequest):
    if not request.url:
        raise HTTPException(status_code=400, detail="URL is required")
    return await _run(YouTubeAdapter().get_video, request.url)


@router.post("/youtube/channel", response_model=YouTubeChannelResponse)
async def get_channel_videos(request: YouTubeChannelRequest):
    if not request.url:
        raise HTTPException(status_code=400, detail="URL is required")
    return await _run(YouTubeAdapter().get_channel_videos, request.url, request.limit)
