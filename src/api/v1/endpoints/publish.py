import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_current_user_conditional, get_news_item_repository, get_social_publisher
from ..schemas import PublishRequest, PublishHistoryResponse
from ....models.user import User
from ....repositories.news_item_repository import NewsItemRepository
from ....services.social.publisher import SocialPublisher

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("", response_model=PublishHistoryResponse)
async def publish(
    request: PublishRequest,
    current_user: User = Depends(get_current_user_conditional),
    publisher: SocialPublisher = Depends(get_social_publisher),
    news_items: NewsItemRepository = Depends(get_news_item_repository)
):
    item = news_items.get_by_id(request.news_item_id)
    if not item:
        raise HTTPException(status_code=404, detail="News item not found")
    if item.user_id != current_user.user_id:
        raise HTTPException(status_code=403, detail="Access denied")

    link_url = request.link_url or item.url
    options = {
        "link_url": link_url,
        "article_url": link_url,
        "article_title": item.title,
        "image_url": request.image_url,
    }
    return await publisher.publish(
        current_user.user_id,
        item.id,
        request.content,
        list(request.platforms),
        options
    )
