"""
Publishing orchestration: credential lookup, per-platform posting and publish history
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from ...config import Settings
from ...exceptions import ServiceNotConfiguredError, SocialAuthError, SocialPlatformError, ValidationError
from ...models.enums import Platform
from ...models.publish_history import PublishHistory
from ...repositories.publish_history_repository import PublishHistoryRepository
from ...repositories.social_connection_repository import SocialConnectionRepository
from .bluesky import BlueskyClient
from .instagram import InstagramAuth, InstagramClient
from .linkedin import LinkedInAuth, LinkedInClient
from .threads import ThreadsAuth, ThreadsClient

logger = structlog.get_logger(__name__)

REQUIRED_CREDENTIALS = {
    Platform.BLUESKY.value: ("identifier", "app_password"),
    Platform.THREADS.value: ("access_token", "user_id"),
    Platform.LINKEDIN.value: ("access_token", "person_urn"),
    Platform.INSTAGRAM.value: ("access_token", "user_id"),
}

OAUTH_PLATFORMS = (Platform.THREADS.value, Platform.LINKEDIN.value, Platform.INSTAGRAM.value)
MANUAL_ONLY_MESSAGE = "X/Twitter has no publishing API; copy the post manually"


def get_oauth_client(platform: str, settings: Settings):
    """OAuth helper for a platform, configured from settings"""
    if platform == Platform.THREADS.value:
        config = (settings.threads_app_id, settings.threads_app_secret, settings.threads_redirect_uri)
        auth_cls = ThreadsAuth
    elif platform == Platform.LINKEDIN.value:
        config = (settings.linkedin_client_id, settings.linkedin_client_secret, settings.linkedin_redirect_uri)
        auth_cls = LinkedInAuth
    elif platform == Platform.INSTAGRAM.value:
        config = (settings.instagram_client_id, settings.instagram_client_secret, settings.instagram_redirect_uri)
        auth_cls = InstagramAuth
    else:
        raise ValidationError(f"OAuth is not supported for {platform}")

    if not all(config):
        raise ServiceNotConfiguredError(f"{platform.capitalize()} app is not configured")
    return auth_cls(*config)


def publish_result(
    platform: str,
    success: bool,
    post: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None
) -> Dict[str, Any]:
    result = {
        "platform": platform,
        "success": success,
        "published_at": datetime.now(timezone.utc).isoformat(),
    }
    if post:
        result["post_id"] = post.get("id") or post.get("uri")
        result["post_url"] = post.get("post_url")
    if error:
        result["error"] = error
    return result


class SocialPublisher:
    def __init__(
        self,
        connections: SocialConnectionRepository,
        history: PublishHistoryRepository,
        poll_interval: Optional[float] = None
    ):
        self.connections = connections
        self.history = history
        self.poll_interval = poll_interval

    def resolve_credentials(
        self,
        user_id: str,
        platform: str,
        supplied: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Stored connection credentials overlaid with any supplied in the request"""
        credentials: Dict[str, Any] = {}
        connection = self.connections.get_by_platform(user_id, platform)
        if connection and connection.is_connected:
            credentials.update(connection.credentials or {})
        credentials.update({k: v for k, v in (supplied or {}).items() if v})

        missing = [key for key in REQUIRED_CREDENTIALS.get(platform, ()) if not credentials.get(key)]
        if missing:
            raise SocialAuthError(
                f"Not authenticated with {platform}. Please connect your account.",
                platform=platform
            )
        return credentials

    def _client_kwargs(self) -> Dict[str, Any]:
        return {"poll_interval": self.poll_interval} if self.poll_interval is not None else {}

    async def post(self, platform: str, credentials: Dict[str, Any], content: str, **options) -> Dict[str, Any]:
        """Publish content to one platform and return {id or uri, post_url}"""
        if platform == Platform.BLUESKY.value:
            client = BlueskyClient()
            await client.login(credentials["identifier"], credentials["app_password"])
            return await client.create_post(
                content,
                link_url=options.get("link_url"),
                reply_to=options.get("reply_to"),
            )

        if platform == Platform.THREADS.value:
            client = ThreadsClient(credentials["access_token"], credentials["user_id"], **self._client_kwargs())
            return await client.create_post(
                content,
                image_url=options.get("image_url"),
                reply_to_id=options.get("reply_to_id"),
            )

        if platform == Platform.LINKEDIN.value:
            client = LinkedInClient(credentials["access_token"], credentials["person_urn"])
            return await client.create_post(
                content,
                article_url=options.get("article_url"),
                article_title=options.get("article_title"),
                article_description=options.get("article_description"),
                visibility=options.get("visibility") or "PUBLIC",
            )

        if platform == Platform.INSTAGRAM.value:
            client = InstagramClient(credentials["access_token"], credentials["user_id"], **self._client_kwargs())
            return await client.create_post(
                image_url=options.get("image_url"),
                caption=content,
                location_id=options.get("location_id"),
                user_tags=options.get("user_tags"),
            )

        raise ValidationError(f"Publishing to {platform} is not supported")

    def record(
        self,
        user_id: str,
        news_item_id: str,
        content: str,
        results: List[Dict[str, Any]]
    ) -> PublishHistory:
        return self.history.create(user_id, news_item_id, content, results)

    async def publish(
        self,
        user_id: str,
        news_item_id: str,
        content: str,
        platforms: List[str],
        options: Optional[Dict[str, Any]] = None
    ) -> PublishHistory:
        """Publish to each platform in order; failures are recorded per platform"""
        options = options or {}
        results = []
        for platform in platforms:
            if platform == Platform.TWITTER.value:
                results.append(publish_result(platform, False, error=MANUAL_ONLY_MESSAGE))
                continue
            try:
                credentials = self.resolve_credentials(user_id, platform)
                post = await self.post(platform, credentials, content, **options)
                results.append(publish_result(platform, True, post=post))
            except (SocialPlatformError, ValidationError) as e:
                logger.warning("publish_failed", platform=platform, news_item_id=news_item_id, error=str(e))
                results.append(publish_result(platform, False, error=str(e)))
            except Exception as e:
                logger.exception("publish_unexpected_error", platform=platform, news_item_id=news_item_id)
                results.append(publish_result(platform, False, error=f"Unexpected error: {e}"))

        record = self.record(user_id, news_item_id, content, results)
        logger.info(
            "publish_completed",
            news_item_id=news_item_id,
            succeeded=record.succeeded_platforms,
            attempted=len(platforms)
        )
        return record
