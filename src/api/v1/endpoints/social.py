"""
Social account connections, OAuth flows and direct posting.

X/Twitter has no route here: posts for it are copied manually by the client.
"""

import uuid
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import (
    get_current_user_conditional,
    get_news_item_repository,
    get_social_connection_repository,
    get_social_publisher,
)
from ..schemas import (
    AuthUrlResponse,
    BlueskyConnectRequest,
    BlueskyPostRequest,
    InstagramPostRequest,
    LinkedInPostRequest,
    OAuthCallbackRequest,
    PostResultResponse,
    SocialConnectionResponse,
    SocialConnectionUpsert,
    SuccessResponse,
    ThreadsPostRequest,
)
from ....config import get_settings
from ....exceptions import (
    ServiceNotConfiguredError,
    SocialAuthError,
    SocialPlatformError,
    ValidationError,
)
from ....models.enums import Platform
from ....models.user import User
from ....repositories.news_item_repository import NewsItemRepository
from ....repositories.social_connection_repository import SocialConnectionRepository
from ....services.social.base import calculate_expires_at
from ....services.social.bluesky import BlueskyClient
from ....services.social.instagram import InstagramClient
from ....services.social.linkedin import LinkedInClient, to_person_urn
from ....services.social.publisher import OAUTH_PLATFORMS, SocialPublisher, get_oauth_client, publish_result
from ....services.social.threads import ThreadsClient

logger = structlog.get_logger(__name__)

router = APIRouter()

AUTH_FAILURE_MARKERS = ("Invalid", "expired", "Unauthorized", "Not authenticated")


def require_oauth_platform(platform: str) -> str:
    if platform not in OAUTH_PLATFORMS:
        raise HTTPException(status_code=404, detail=f"OAuth is not available for {platform}")
    return platform


def post_failure_status(platform: str, message: str) -> int:
    if platform == Platform.INSTAGRAM.value:
        return 500
    return 401 if any(marker in message for marker in AUTH_FAILURE_MARKERS) else 500


# =============================================================================
# CONNECTIONS
# =============================================================================

@router.get("/connections", response_model=List[SocialConnectionResponse])
async def list_connections(
    current_user: User = Depends(get_current_user_conditional),
    repo: SocialConnectionRepository = Depends(get_social_connection_repository)
):
    return repo.get_all_by_user(current_user.user_id)


@router.post("/connections", response_model=SocialConnectionResponse, status_code=201)
async def upsert_connection(
    request: SocialConnectionUpsert,
    current_user: User = Depends(get_current_user_conditional),
    repo: SocialConnectionRepository = Depends(get_social_connection_repository)
):
    return repo.upsert(
        current_user.user_id,
        request.platform,
        request.handle,
        is_connected=request.is_connected,
        credentials=request.credentials
    )


@router.delete("/connections/{platform}", response_model=SuccessResponse)
async def delete_connection(
    platform: Platform,
    current_user: User = Depends(get_current_user_conditional),
    repo: SocialConnectionRepository = Depends(get_social_connection_repository)
):
    if not repo.delete(current_user.user_id, platform.value):
        raise HTTPException(status_code=404, detail="Connection not found")
    logger.info("social_connection_removed", user_id=current_user.user_id, platform=platform.value)
    return SuccessResponse()


# =============================================================================
# BLUESKY (app password)
# =============================================================================

@router.post("/bluesky/connect")
async def connect_bluesky(
    request: BlueskyConnectRequest,
    current_user: User = Depends(get_current_user_conditional),
    repo: SocialConnectionRepository = Depends(get_social_connection_repository)
):
    try:
        profile = await BlueskyClient().login(request.identifier, request.app_password)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SocialAuthError as e:
        raise HTTPException(status_code=401, detail=e.message)
    except SocialPlatformError as e:
        raise HTTPException(status_code=500, detail=f"Failed to connect Bluesky: {e.message}")

    repo.upsert(
        current_user.user_id,
        Platform.BLUESKY.value,
        profile["handle"],
        credentials={
            "identifier": request.identifier.strip(),
            "app_password": request.app_password,
            "did": profile["did"],
        }
    )
    logger.info("bluesky_connected", user_id=current_user.user_id, handle=profile["handle"])
    return {"success": True, "profile": profile}


# =============================================================================
# OAUTH (threads, linkedin, instagram)
# =============================================================================

@router.get("/{platform}/auth", response_model=AuthUrlResponse)
async def get_auth_url(
    platform: str,
    current_user: User = Depends(get_current_user_conditional)
):
    require_oauth_platform(platform)
    try:
        auth = get_oauth_client(platform, get_settings())
    except ServiceNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e))

    state = str(uuid.uuid4())
    return AuthUrlResponse(auth_url=auth.get_auth_url(state), state=state)


def _required(value: Any, field: str, platform: str) -> Any:
    if not value:
        raise SocialAuthError(f"Invalid token response: missing {field}", platform=platform)
    return value


async def _complete_oauth(platform: str, code: str) -> Dict[str, Any]:
    """Exchange the code and read the profile. Returns {handle, profile, credentials}."""
    auth = get_oauth_client(platform, get_settings())
    token = await auth.exchange_code(code)
    exchanged_token = _required(token.get("access_token"), "access_token", platform)

    if platform == Platform.LINKEDIN.value:
        profile = await LinkedInClient(exchanged_token).get_profile()
        member_id = _required(profile.get("sub"), "sub", platform)
        credentials = {
            "access_token": exchanged_token,
            "refresh_token": token.get("refresh_token"),
            "expires_at": calculate_expires_at(token.get("expires_in")),
            "person_urn": to_person_urn(member_id),
        }
        handle = profile.get("name") or profile.get("email") or member_id
        return {"handle": handle, "profile": profile, "credentials": credentials}

    user_id = _required(token.get("user_id"), "user_id", platform)
    long_lived = await auth.get_long_lived_token(exchanged_token)
    access_token = long_lived.get("access_token") or exchanged_token
    expires_in = long_lived.get("expires_in") or token.get("expires_in")

    client_cls = ThreadsClient if platform == Platform.THREADS.value else InstagramClient
    profile = await client_cls(access_token, user_id).get_profile()
    credentials = {
        "access_token": access_token,
        "user_id": user_id,
        "expires_at": calculate_expires_at(expires_in),
    }
    return {"handle": profile.get("username") or user_id, "profile": profile, "credentials": credentials}


@router.post("/{platform}/callback")
async def oauth_callback(
    platform: str,
    request: OAuthCallbackRequest,
    current_user: User = Depends(get_current_user_conditional),
    repo: SocialConnectionRepository = Depends(get_social_connection_repository)
):
    require_oauth_platform(platform)
    if not request.code:
        raise HTTPException(status_code=400, detail="Authorization code is required")

    try:
        result = await _complete_oauth(platform, request.code)
    except ServiceNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except (SocialPlatformError, ValidationError) as e:
        message = str(e)
        logger.warning("oauth_callback_failed", platform=platform, error=message)
        if platform == Platform.THREADS.value:
            status_code = 401
        elif platform == Platform.LINKEDIN.value:
            status_code = 401 if "Invalid" in message or "expired" in message else 500
        else:
            status_code = 500
        raise HTTPException(status_code=status_code, detail=f"Failed to connect {platform}: {message}")

    repo.upsert(current_user.user_id, platform, result["handle"], credentials=result["credentials"])
    logger.info("oauth_connected", platform=platform, user_id=current_user.user_id)
    return {"success": True, "profile": result["profile"], "credentials": result["credentials"]}


@router.post("/{platform}/refresh")
async def refresh_token(
    platform: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: SocialConnectionRepository = Depends(get_social_connection_repository)
):
    require_oauth_platform(platform)
    connection = repo.get_by_platform(current_user.user_id, platform)
    if not connection or not connection.credential("access_token"):
        raise HTTPException(status_code=404, detail="Connection not found")

    try:
        auth = get_oauth_client(platform, get_settings())
        if platform == Platform.LINKEDIN.value:
            stored_refresh = connection.credential("refresh_token")
            if not stored_refresh:
                raise HTTPException(status_code=400, detail="No refresh token stored for LinkedIn")
            token = await auth.refresh_token(stored_refresh)
        else:
            token = await auth.refresh_token(connection.credential("access_token"))
    except HTTPException:
        raise
    except ServiceNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except SocialAuthError as e:
        raise HTTPException(status_code=401, detail=e.message)
    except SocialPlatformError as e:
        raise HTTPException(status_code=500, detail=f"Failed to refresh token: {e.message}")

    values = {
        "access_token": token["access_token"],
        "expires_at": calculate_expires_at(token.get("expires_in")),
    }
    if token.get("refresh_token"):
        values["refresh_token"] = token["refresh_token"]
    repo.update_credentials(connection, **values)

    logger.info("oauth_token_refreshed", platform=platform, user_id=current_user.user_id)
    return {"success": True, "expires_at": values["expires_at"]}


# =============================================================================
# POSTING
# =============================================================================

async def _post_and_record(
    platform: str,
    user: User,
    publisher: SocialPublisher,
    news_items: NewsItemRepository,
    supplied_credentials: Dict[str, Any],
    content: str,
    news_item_id: Optional[str],
    **options
) -> PostResultResponse:
    if news_item_id:
        item = news_items.get_by_id(news_item_id)
        if not item:
            raise HTTPException(status_code=404, detail="News item not found")
        if item.user_id != user.user_id:
            raise HTTPException(status_code=403, detail="Access denied")

    try:
        credentials = publisher.resolve_credentials(user.user_id, platform, supplied_credentials)
        post = await publisher.post(platform, credentials, content, **options)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SocialPlatformError as e:
        logger.warning("social_post_failed", platform=platform, error=e.message)
        if news_item_id:
            publisher.record(user.user_id, news_item_id, content, [publish_result(platform, False, error=e.message)])
        raise HTTPException(status_code=post_failure_status(platform, e.message), detail=e.message)

    if news_item_id:
        publisher.record(user.user_id, news_item_id, content, [publish_result(platform, True, post=post)])
    return PostResultResponse(post=post)


@router.post("/bluesky/post", response_model=PostResultResponse)
async def post_to_bluesky(
    request: BlueskyPostRequest,
    current_user: User = Depends(get_current_user_conditional),
    publisher: SocialPublisher = Depends(get_social_publisher),
    news_items: NewsItemRepository = Depends(get_news_item_repository)
):
    return await _post_and_record(
        Platform.BLUESKY.value,
        current_user,
        publisher,
        news_items,
        {"identifier": request.identifier, "app_password": request.app_password},
        request.text,
        request.news_item_id,
        link_url=request.link_url,
        reply_to=request.reply_to,
    )


@router.post("/threads/post", response_model=PostResultResponse)
async def post_to_threads(
    request: ThreadsPostRequest,
    current_user: User = Depends(get_current_user_conditional),
    publisher: SocialPublisher = Depends(get_social_publisher),
    news_items: NewsItemRepository = Depends(get_news_item_repository)
):
    return await _post_and_record(
        Platform.THREADS.value,
        current_user,
        publisher,
        news_items,
        {"access_token": request.access_token, "user_id": request.user_id},
        request.text,
        request.news_item_id,
        image_url=request.image_url,
        reply_to_id=request.reply_to_id,
    )


@router.post("/linkedin/post", response_model=PostResultResponse)
async def post_to_linkedin(
    request: LinkedInPostRequest,
    current_user: User = Depends(get_current_user_conditional),
    publisher: SocialPublisher = Depends(get_social_publisher),
    news_items: NewsItemRepository = Depends(get_news_item_repository)
):
    return await _post_and_record(
        Platform.LINKEDIN.value,
        current_user,
        publisher,
        news_items,
        {"access_token": request.access_token, "person_urn": request.person_urn},
        request.text,
        request.news_item_id,
        article_url=request.article_url,
        article_title=request.article_title,
        article_description=request.article_description,
        visibility=request.visibility,
    )


@router.post("/instagram/post", response_model=PostResultResponse)
async def post_to_instagram(
    request: InstagramPostRequest,
    current_user: User = Depends(get_current_user_conditional),
    publisher: SocialPublisher = Depends(get_social_publisher),
    news_items: NewsItemRepository = Depends(get_news_item_repository)
):
    user_tags = [tag.model_dump() for tag in request.user_tags] if request.user_tags else None
    return await _post_and_record(
        Platform.INSTAGRAM.value,
        current_user,
        publisher,
        news_items,
        {"access_token": request.access_token, "user_id": request.user_id},
        request.caption,
        request.news_item_id,
        image_url=request.image_url,
        location_id=request.location_id,
        user_tags=user_tags,
    )
