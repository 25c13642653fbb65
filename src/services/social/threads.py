"""
Threads Graph API client and OAuth flow.
Posts are published in two steps: create a media container, then publish it.
"""

import asyncio
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import structlog

from ...api.v1.constants import PlatformLimit
from ...exceptions import SocialPlatformError, ValidationError
from ...models.enums import Platform
from .base import SocialClient

logger = structlog.get_logger(__name__)

THREADS_GRAPH_URL = "https://graph.threads.net/v1.0"
THREADS_OAUTH_URL = "https://threads.net/oauth/authorize"
THREADS_SCOPES = "threads_basic,threads_content_publish"
PROFILE_FIELDS = "id,username,name,threads_profile_picture_url,threads_biography"

CONTAINER_POLL_ATTEMPTS = 10
CONTAINER_POLL_INTERVAL = 1.0


class ThreadsAuth(SocialClient):
    platform = Platform.THREADS.value

    def __init__(self, app_id: str, app_secret: str, redirect_uri: str, timeout: float = 30.0):
        super().__init__(timeout=timeout)
        self.app_id = app_id
        self.app_secret = app_secret
        self.redirect_uri = redirect_uri

    def get_auth_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.app_id,
            "redirect_uri": self.redirect_uri,
            "scope": THREADS_SCOPES,
            "response_type": "code",
        }
        if state:
            params["state"] = state
        return f"{THREADS_OAUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """Short-lived token for an authorization code"""
        data = await self._post_json(
            f"{THREADS_GRAPH_URL}/oauth/access_token",
            "Failed to exchange code for token",
            data={
                "client_id": self.app_id,
                "client_secret": self.app_secret,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
                "code": code,
            },
        )
        return {
            "access_token": data.get("access_token"),
            "user_id": str(data.get("user_id", "")),
            "expires_in": data.get("expires_in"),
        }

    async def get_long_lived_token(self, short_lived_token: str) -> Dict[str, Any]:
        """Exchange a short-lived token for a 60-day one"""
        data = await self._get_json(
            f"{THREADS_GRAPH_URL}/access_token",
            "Failed to get long-lived token",
            params={
                "grant_type": "th_exchange_token",
                "client_secret": self.app_secret,
                "access_token": short_lived_token,
            },
        )
        return {"access_token": data.get("access_token"), "expires_in": data.get("expires_in")}

    async def refresh_token(self, access_token: str) -> Dict[str, Any]:
        data = await self._get_json(
            f"{THREADS_GRAPH_URL}/refresh_access_token",
            "Failed to refresh token",
            params={"grant_type": "th_refresh_token", "access_token": access_token},
        )
        return {"access_token": data.get("access_token"), "expires_in": data.get("expires_in")}


class ThreadsClient(SocialClient):
    platform = Platform.THREADS.value

    def __init__(
        self,
        access_token: str,
        user_id: str,
        timeout: float = 30.0,
        poll_interval: float = CONTAINER_POLL_INTERVAL
    ):
        super().__init__(timeout=timeout)
        self.access_token = access_token
        self.user_id = user_id
        self.poll_interval = poll_interval

    async def get_profile(self) -> Dict[str, Any]:
        data = await self._get_json(
            f"{THREADS_GRAPH_URL}/me",
            "Failed to get profile",
            params={"fields": PROFILE_FIELDS, "access_token": self.access_token},
        )
        return {
            "id": data.get("id"),
            "username": data.get("username"),
            "name": data.get("name"),
            "profile_picture_url": data.get("threads_profile_picture_url"),
            "biography": data.get("threads_biography"),
        }

    async def create_post(
        self,
        text: str,
        image_url: Optional[str] = None,
        reply_to_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not text or not text.strip():
            raise ValidationError("Post text is required")
        if len(text) > PlatformLimit.THREADS:
            raise ValidationError(f"Post text cannot exceed {PlatformLimit.THREADS} characters")

        container_id = await self._create_container(text, image_url, reply_to_id)
        await self._wait_for_container(container_id)

        data = await self._post_json(
            f"{THREADS_GRAPH_URL}/{self.user_id}/threads_publish",
            "Failed to publish thread",
            data={"creation_id": container_id, "access_token": self.access_token},
        )
        post_id = data.get("id")
        profile = await self.get_profile()

        logger.info("threads_post_published", post_id=post_id)
        return {
            "id": post_id,
            "post_url": f"https://www.threads.net/@{profile['username']}/post/{post_id}",
        }

    async def _create_container(self, text: str, image_url: Optional[str], reply_to_id: Optional[str]) -> str:
        params = {
            "media_type": "IMAGE" if image_url else "TEXT",
            "text": text,
            "access_token": self.access_token,
        }
        if image_url:
            params["image_url"] = image_url
        if reply_to_id:
            params["reply_to_id"] = reply_to_id

        data = await self._post_json(
            f"{THREADS_GRAPH_URL}/{self.user_id}/threads",
            "Failed to create media container",
            data=params,
        )
        return data.get("id")

    async def _wait_for_container(self, container_id: str) -> None:
        for _ in range(CONTAINER_POLL_ATTEMPTS):
            try:
                data = await self._get_json(
                    f"{THREADS_GRAPH_URL}/{container_id}",
                    "Failed to check container status",
                    params={"fields": "status", "access_token": self.access_token},
                )
            except SocialPlatformError as e:
                logger.info("threads_container_status_unavailable", container_id=container_id, error=e.message)
                data = {}

            status = data.get("status")
            if status == "FINISHED":
                return
            if status == "ERROR":
                raise SocialPlatformError("Container processing failed", platform=self.platform)
            await asyncio.sleep(self.poll_interval)

        # Threads often publishes containers that never reported FINISHED
        logger.warning("threads_container_not_finished", container_id=container_id)
