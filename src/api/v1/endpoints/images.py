import base64
from datetime import datetime, timezone
from typing import Union

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ...dependencies import get_image_service
from ..constants import ImageMode, DEFAULT_IMAGE_ASPECT_RATIO
from ..schemas import ImageRequest, ImageSizesResponse, GeneratedImageResponse
from ....exceptions import ValidationError
from ....services.image_service import ImageService, get_platform_sizes

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/image", response_model=Union[ImageSizesResponse, GeneratedImageResponse])
async def image(
    request: ImageRequest,
    service: ImageService = Depends(get_image_service)
):
    if request.mode == ImageMode.SIZES:
        if not request.platform:
            raise HTTPException(status_code=400, detail="Platform is required")
        return ImageSizesResponse(sizes=get_platform_sizes(request.platform))

    if not request.headline or not request.platform:
        raise HTTPException(status_code=400, detail="Headline and platform are required")

    try:
        result = await service.generate_news_image(
            request.headline,
            request.summary,
            request.platform,
            request.aspect_ratio
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("image_generation_failed", platform=request.platform, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate image")

    return GeneratedImageResponse(
        **result,
        aspect_ratio=request.aspect_ratio,
        headline=request.headline,
        platform=request.platform,
        created_at=datetime.now(timezone.utc),
    )


@router.get("/image")
async def image_png(
    headline: str = Query(..., min_length=1),
    platform: str = Query(...),
    aspect: str = Query(DEFAULT_IMAGE_ASPECT_RATIO),
    service: ImageService = Depends(get_image_service)
):
    try:
        result = await service.generate_news_image(headline, None, platform, aspect)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=base64.b64decode(result["base64"]),
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=3600"}
    )
