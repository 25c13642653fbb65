from typing import Optional

import structlog
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, Request, HTTPException
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.firebase import verify_firebase_token, get_or_create_user
from ..repositories.user_repository import UserRepository
from ..repositories.source_repository import SourceRepository
from ..repositories.news_item_repository import NewsItemRepository
from ..repositories.style_template_repository import StyleTemplateRepository
from ..repositories.social_connection_repository import SocialConnectionRepository
from ..repositories.publish_history_repository import PublishHistoryRepository
from ..services.ai_content_service import AIContentService
from ..services.collection_service import SourceCollectionService
from ..services.image_service import ImageService
from ..services.llm_service import LLMService, LLMProvider
from ..services.news_sources.browser_scraper import BrowserScraper
from ..services.social.publisher import SocialPublisher
from ..models.user import User
from ..config import get_settings

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_source_repository(db: Session = Depends(get_db)) -> SourceRepository:
    return SourceRepository(db)


def get_news_item_repository(db: Session = Depends(get_db)) -> NewsItemRepository:
    return NewsItemRepository(db)


def get_style_template_repository(db: Session = Depends(get_db)) -> StyleTemplateRepository:
    return StyleTemplateRepository(db)


def get_social_connection_repository(db: Session = Depends(get_db)) -> SocialConnectionRepository:
    return SocialConnectionRepository(db)


def get_publish_history_repository(db: Session = Depends(get_db)) -> PublishHistoryRepository:
    return PublishHistoryRepository(db)


def get_llm_service() -> LLMService:
    settings = get_settings()
    return LLMService(
        openai_api_key=settings.openai_api_key,
        anthropic_api_key=settings.anthropic_api_key,
        google_api_key=settings.google_api_key,
        openai_model_name=settings.openai_model_name,
        anthropic_model_name=settings.anthropic_model_name,
        google_model_name=settings.google_model_name,
        openai_image_model_name=settings.openai_image_model_name,
        preferred_provider=LLMProvider(settings.preferred_llm_provider)
    )


def get_ai_content_service(llm_service: LLMService = Depends(get_llm_service)) -> AIContentService:
    return AIContentService(llm_service, language=get_settings().content_language)


def get_image_service(llm_service: LLMService = Depends(get_llm_service)) -> ImageService:
    return ImageService(llm_service, font_path=get_settings().overlay_font_path)


def get_browser_scraper() -> BrowserScraper:
    settings = get_settings()
    return BrowserScraper(
        token=settings.browserless_token,
        endpoint=settings.browserless_url,
        timeout_ms=settings.browser_timeout_ms
    )


def get_collection_service(
    db: Session = Depends(get_db),
    ai_service: AIContentService = Depends(get_ai_content_service),
    browser_scraper: BrowserScraper = Depends(get_browser_scraper)
) -> SourceCollectionService:
    return SourceCollectionService(db, ai_service=ai_service, browser_scraper=browser_scraper)


def get_social_publisher(
    connections: SocialConnectionRepository = Depends(get_social_connection_repository),
    history: PublishHistoryRepository = Depends(get_publish_history_repository)
) -> SocialPublisher:
    return SocialPublisher(connections, history)


async def get_current_user_required(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    user = await get_current_user_optional(request, db, credentials)
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Please provide a valid Firebase token."
        )
    return user


async def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    if not credentials or not credentials.credentials:
        return None

    firebase_data = verify_firebase_token(credentials.credentials)
    if not firebase_data:
        return None

    firebase_uid = firebase_data.get("uid")
    email = firebase_data.get("email")
    if not firebase_uid or not email:
        return None

    name = firebase_data.get("name") or email.split("@")[0]
    return await get_or_create_user(
        db=db,
        firebase_uid=firebase_uid,
        email=email,
        display_name=name
    )


async def get_or_create_default_user(db: Session) -> User:
    """The fixed account every request acts as when authentication is disabled"""
    settings = get_settings()
    repo = UserRepository(db)

    existing_user = repo.get_by_id(settings.default_user_id)
    if existing_user:
        return existing_user

    logger.info("default_user_created", user_id=settings.default_user_id)
    return repo.create(
        email=settings.default_user_email,
        display_name="Default User",
        user_id=settings.default_user_id
    )


async def get_current_user_conditional(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    """
    Conditional authentication dependency that enforces auth based on settings.
    - If authentication_enabled=True: requires a valid Firebase token
    - If authentication_enabled=False: returns the default user without requiring auth
    """
    if not get_settings().authentication_enabled:
        return await get_or_create_default_user(db)

    return await get_current_user_required(request, db, credentials)


async def get_current_user_optional_conditional(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    """
    Conditional optional authentication dependency.
    - If authentication_enabled=True: behaves like get_current_user_optional
    - If authentication_enabled=False: returns the default user (never None)
    """
    if not get_settings().authentication_enabled:
        return await get_or_create_default_user(db)

    return await get_current_user_optional(request, db, credentials)
