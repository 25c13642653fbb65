from typing import List, Optional, Union

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import (
    get_current_user_conditional,
    get_news_item_repository,
    get_source_repository,
    get_publish_history_repository,
)
from ..schemas import (
    NewsItemCreate,
    NewsItemUpdate,
    NewsItemResponse,
    PublishHistoryResponse,
    SuccessResponse,
)
from ....models.news_item import NewsItem
from ....models.user import User
from ....repositories.news_item_repository import NewsItemRepository
from ....repositories.publish_history_repository import PublishHistoryRepository
from ....repositories.source_repository import SourceRepository

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_owned_item(item_id: str, user: User, repo: NewsItemRepository) -> NewsItem:
    item = repo.get_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="News item not found")
    if item.user_id != user.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return item


def item_fields(request: Union[NewsItemCreate, NewsItemUpdate], exclude_unset: bool = False) -> dict:
    fields = request.model_dump(exclude_unset=exclude_unset)
    if request.quick_summary is not None:
        # JSON column; datetimes must be serialized
        fields["quick_summary"] = request.quick_summary.model_dump(mode="json")
    return fields


@router.get("", response_model=List[NewsItemResponse])
async def list_news(
    source_id: Optional[str] = Query(None, description="Only items from this source"),
    bookmarked: Optional[bool] = Query(None, description="Filter by bookmark flag"),
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository)
):
    return repo.get_all_by_user(current_user.user_id, source_id=source_id, bookmarked=bookmarked)


@router.post("", response_model=Union[List[NewsItemResponse], NewsItemResponse], status_code=201)
async def create_news(
    request: Union[List[NewsItemCreate], NewsItemCreate],
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository),
    sources: SourceRepository = Depends(get_source_repository)
):
    batch = isinstance(request, list)
    requests = request if batch else [request]

    for source_id in {r.source_id for r in requests}:
        source = sources.get_by_id(source_id)
        if not source:
            raise HTTPException(status_code=404, detail="Source not found")
        if source.user_id != current_user.user_id:
            raise HTTPException(status_code=403, detail="Access denied")

    created = repo.create_many(current_user.user_id, [item_fields(r) for r in requests])
    logger.info("news_items_created", user_id=current_user.user_id, count=len(created))
    return created if batch else created[0]


@router.delete("", response_model=SuccessResponse)
async def delete_all_news(
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository)
):
    deleted = repo.delete_all_by_user(current_user.user_id)
    logger.info("news_items_cleared", user_id=current_user.user_id, deleted=deleted)
    return SuccessResponse()


@router.get("/{item_id}", response_model=NewsItemResponse)
async def get_news_item(
    item_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository)
):
    return get_owned_item(item_id, current_user, repo)


@router.patch("/{item_id}", response_model=NewsItemResponse)
async def update_news_item(
    item_id: str,
    request: NewsItemUpdate,
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository)
):
    item = get_owned_item(item_id, current_user, repo)
    return repo.update(item, **item_fields(request, exclude_unset=True))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_news_item(
    item_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository)
):
    get_owned_item(item_id, current_user, repo)
    repo.delete(item_id)
    return SuccessResponse()


@router.get("/{item_id}/publish-history", response_model=List[PublishHistoryResponse])
async def get_publish_history(
    item_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: NewsItemRepository = Depends(get_news_item_repository),
    history: PublishHistoryRepository = Depends(get_publish_history_repository)
):
    get_owned_item(item_id, current_user, repo)
    return history.get_by_news_item(item_id)
