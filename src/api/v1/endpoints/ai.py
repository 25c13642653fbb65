from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_ai_content_service
from ..constants import AIMode
from ..schemas import AIRequest, HeadlineRequest, HeadlineResponse
from ....exceptions import ValidationError
from ....services.ai_content_service import AIContentService

logger = structlog.get_logger(__name__)

router = APIRouter()


async def run_ai_mode(request: AIRequest, service: AIContentService) -> Dict[str, Any]:
    style = request.style_template.model_dump() if request.style_template else None

    if request.mode == AIMode.SUMMARIZE:
        return await service.summarize(request.title, request.content)

    if request.mode == AIMode.GENERATE:
        return await service.generate_post(
            request.title,
            request.summary or request.content,
            request.platform,
            style_template=style,
            url=request.url
        )

    if request.mode == AIMode.ANALYZE_STYLE:
        return await service.analyze_style(request.examples or [])

    if request.mode == AIMode.REGENERATE:
        return await service.regenerate_post(
            request.previous_content,
            request.feedback,
            request.platform,
            style_template=style
        )

    if request.mode == AIMode.TRANSLATE:
        return await service.translate(request.title, request.content)

    raise ValidationError("Invalid mode")


@router.post("/ai")
async def process_with_ai(
    request: AIRequest,
    service: AIContentService = Depends(get_ai_content_service)
):
    try:
        return await run_ai_mode(request, service)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("ai_request_failed", mode=request.mode, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to process with AI: {e}")


@router.post("/headline", response_model=HeadlineResponse)
async def generate_headline(
    request: HeadlineRequest,
    service: AIContentService = Depends(get_ai_content_service)
):
    try:
        return await service.generate_headline(request.title, request.content)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("headline_generation_failed", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to process with AI: {e}")
