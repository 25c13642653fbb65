"""
Instagram API with Instagram Login: OAuth flow and image publishing
"""

import asyncio
import json
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import structlog

from ...api.v1.constants import PlatformLimit
from ...exceptions import SocialPlatformError, ValidationError
from ...models.enums import Platform
from .base import SocialClient

logger = structlog.get_logger(__name__)

INSTAGRAM_AUTH_URL = "https://www.instagram.com/oauth/authorize"
INSTAGRAM_TOKEN_URL = "https://api.instagram.com/oauth/access_token"
INSTAGRAM_GRAPH_URL = "https://graph.instagram.com"
INSTAGRAM_SCOPES = "instagram_business_basic,instagram_business_content_publish"
PROFILE_FIELDS = "id,username,name,profile_picture_url,account_type"
SHORT_LIVED_TOKEN_SECONDS = 3600

CONTAINER_POLL_ATTEMPTS = 10
CONTAINER_POLL_INTERVAL = 2.0


class InstagramAuth(SocialClient):
    platform = Platform.INSTAGRAM.value

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 30.0):
        super().__init__(timeout=timeout)
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def get_auth_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": INSTAGRAM_SCOPES,
        }
        if state:
            params["state"] = state
        return f"{INSTAGRAM_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        data = await self._post_json(
            INSTAGRAM_TOKEN_URL,
            "Token exchange failed",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
                "code": code,
            },
        )
        return {
            "access_token": data.get("access_token"),
            "user_id": str(data.get("user_id", "")),
            "expires_in": SHORT_LIVED_TOKEN_SECONDS,
        }

    async def get_long_lived_token(self, short_lived_token: str) -> Dict[str, Any]:
        data = await self._get_json(
            f"{INSTAGRAM_GRAPH_URL}/access_token",
            "Long-lived token exchange failed",
            params={
                "grant_type": "ig_exchange_token",
                "client_secret": self.client_secret,
                "access_token": short_lived_token,
            },
        )
        return {"access_token": data.get("access_token"), "expires_in": data.get("expires_in")}

    async def refresh_token(self, access_token: str) -> Dict[str, Any]:
        data = await self._get_json(
            f"{INSTAGRAM_GRAPH_URL}/refresh_access_token",
            "Token refresh failed",
            params={"grant_type": "ig_refresh_token", "access_token": access_token},
        )
        return {"access_token": data.get("access_token"), "expires_in": data.get("expires_in")}


class InstagramClient(SocialClient):
    platform = Platform.INSTAGRAM.value

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
            f"{INSTAGRAM_GRAPH_URL}/me",
            "Failed to get profile",
            params={"fields": PROFILE_FIELDS, "access_token": self.access_token},
        )
        return {
            "id": data.get("id"),
            "username": data.get("username"),
            "name": data.get("name"),
            "profile_picture_url": data.get("profile_picture_url"),
            "account_type": data.get("account_type"),
        }

    async def create_post(
        self,
        image_url: str,
        caption: str,
        location_id: Optional[str] = None,
        user_tags: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        if not image_url:
            raise ValidationError("Image URL is required for Instagram posts")
        if not image_url.startswith("https://"):
            raise ValidationError("Image URL must use HTTPS")
        if len(caption or "") > PlatformLimit.INSTAGRAM:
            raise ValidationError("Caption exceeds 2,200 character limit")

        container_id = await self._create_container(image_url, caption or "", location_id, user_tags)
        await self._wait_for_container(container_id)

        data = await self._post_json(
            f"{INSTAGRAM_GRAPH_URL}/{self.user_id}/media_publish",
            "Failed to publish",
            params={"creation_id": container_id, "access_token": self.access_token},
        )
        media_id = data.get("id")

        post_url = f"https://www.instagram.com/p/{media_id}"
        try:
            media = await self._get_json(
                f"{INSTAGRAM_GRAPH_URL}/{media_id}",
                "Failed to read permalink",
                params={"fields": "permalink", "access_token": self.access_token},
            )
            post_url = media.get("permalink") or post_url
        except SocialPlatformError as e:
            logger.info("instagram_permalink_unavailable", media_id=media_id, error=e.message)

        logger.info("instagram_post_published", media_id=media_id)
        return {"id": media_id, "post_url": post_url}

    async def _create_container(
        self,
        image_url: str,
        caption: str,
        location_id: Optional[str],
        user_tags: Optional[List[Dict[str, Any]]]
    ) -> str:
        params = {
            "image_url": image_url,
            "caption": caption,
            "access_token": self.access_token,
        }
        if location_id:
            params["location_id"] = location_id
        if user_tags:
            tags = [{"username": t["username"], "x": t["x"], "y": t["y"]} for t in user_tags]
            params["user_tags"] = json.dumps(tags)

        data = await self._post_json(
            f"{INSTAGRAM_GRAPH_URL}/{self.user_id}/media",
            "Failed to create container",
            params=params,
        )
        return data.get("id")

    async def _wait_for_container(self, container_id: str) -> None:
        for _ in range(CONTAINER_POLL_ATTEMPTS):
            data = await self._get_json(
                f"{INSTAGRAM_GRAPH_URL}/{container_id}",
                "Failed to check container status",
                params={"fields": "status_code", "access_token": self.access_token},
            )
            status = data.get("status_code")
            if status == "FINISHED":
                return
            if status == "ERROR":
                raise SocialPlatformError("Container processing failed", platform=self.platform)
            await asyncio.sleep(self.poll_interval)

        raise SocialPlatformError("Container processing timeout", platform=self.platform)
