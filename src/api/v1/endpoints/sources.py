from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import (
    get_current_user_conditional,
    get_source_repository,
    get_collection_service,
)
from ..schemas import SourceCreate, SourceUpdate, SourceResponse, CollectResponse, SuccessResponse
from ....exceptions import ExternalServiceError, ScrapeTimeoutError, ScrapingError, ValidationError
from ....models.source import Source
from ....models.user import User
from ....repositories.source_repository import SourceRepository
from ....services.collection_service import SourceCollectionService

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_owned_source(source_id: str, user: User, repo: SourceRepository) -> Source:
    source = repo.get_by_id(source_id)
    if not source:
        raise HTTPException(status_code=404, detail="Source not found")
    if source.user_id != user.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return source


@router.get("", response_model=List[SourceResponse])
async def list_sources(
    current_user: User = Depends(get_current_user_conditional),
    repo: SourceRepository = Depends(get_source_repository)
):
    return repo.get_all_by_user(current_user.user_id)


@router.post("", response_model=SourceResponse, status_code=201)
async def create_source(
    request: SourceCreate,
    current_user: User = Depends(get_current_user_conditional),
    repo: SourceRepository = Depends(get_source_repository)
):
    source = repo.create(current_user.user_id, **request.model_dump())
    logger.info("source_created", source_id=source.id, source_type=source.type)
    return source


@router.get("/{source_id}", response_model=SourceResponse)
async def get_source(
    source_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: SourceRepository = Depends(get_source_repository)
):
    return get_owned_source(source_id, current_user, repo)


@router.patch("/{source_id}", response_model=SourceResponse)
async def update_source(
    source_id: str,
    request: SourceUpdate,
    current_user: User = Depends(get_current_user_conditional),
    repo: SourceRepository = Depends(get_source_repository)
):
    source = get_owned_source(source_id, current_user, repo)
    return repo.update(source, **request.model_dump(exclude_unset=True))


@router.delete("/{source_id}", response_model=SuccessResponse)
async def delete_source(
    source_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: SourceRepository = Depends(get_source_repository)
):
    get_owned_source(source_id, current_user, repo)
    repo.delete(source_id)
    logger.info("source_deleted", source_id=source_id)
    return SuccessResponse()


@router.post("/{source_id}/collect", response_model=CollectResponse)
async def collect_source(
    source_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: SourceRepository = Depends(get_source_repository),
    service: SourceCollectionService = Depends(get_collection_service)
):
    source = get_owned_source(source_id, current_user, repo)
    try:
        return await service.collect(source, current_user)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScrapeTimeoutError:
        raise HTTPException(status_code=408, detail="Request timeout - site took too long to respond")
    except ScrapingError as e:
        logger.warning("source_collect_failed", source_id=source_id, error=str(e))
        raise HTTPException(status_code=502, detail=f"Failed to collect source: {e}")
    except ExternalServiceError as e:
        # scraping service missing or unreachable
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error("source_collect_error", source_id=source_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to collect source")
