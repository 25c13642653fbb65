"""
LinkedIn OAuth 2.0 flow and Posts API client
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode
import uuid

import structlog

from ...api.v1.constants import PlatformLimit
from ...exceptions import ValidationError
from ...models.enums import Platform
from .base import SocialClient

logger = structlog.get_logger(__name__)

LINKEDIN_AUTH_URL = "https://www.linkedin.com/oauth/v2/authorization"
LINKEDIN_TOKEN_URL = "https://www.linkedin.com/oauth/v2/accessToken"
LINKEDIN_USERINFO_URL = "https://api.linkedin.com/v2/userinfo"
LINKEDIN_POSTS_URL = "https://api.linkedin.com/rest/posts"
LINKEDIN_SCOPES = "openid profile email w_member_social"
LINKEDIN_API_VERSION = "202411"
PERSON_URN_PREFIX = "urn:li:person:"


def to_person_urn(sub: str) -> str:
    if sub.startswith(PERSON_URN_PREFIX):
        return sub
    return f"{PERSON_URN_PREFIX}{sub}"


def _token_result(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "access_token": data.get("access_token"),
        "expires_in": data.get("expires_in"),
        "refresh_token": data.get("refresh_token"),
        "refresh_token_expires_in": data.get("refresh_token_expires_in"),
        "scope": data.get("scope"),
    }


class LinkedInAuth(SocialClient):
    platform = Platform.LINKEDIN.value

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 30.0):
        super().__init__(timeout=timeout)
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def get_auth_url(self, state: Optional[str] = None) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": LINKEDIN_SCOPES,
            "state": state or str(uuid.uuid4()),
        }
        return f"{LINKEDIN_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        data = await self._post_json(
            LINKEDIN_TOKEN_URL,
            "Failed to exchange code for token",
            data={
                "grant_type": "authorization_code",
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
            },
        )
        return _token_result(data)

    async def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        data = await self._post_json(
            LINKEDIN_TOKEN_URL,
            "Failed to refresh token",
            data={
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
        )
        return _token_result(data)


class LinkedInClient(SocialClient):
    platform = Platform.LINKEDIN.value

    def __init__(self, access_token: str, person_urn: Optional[str] = None, timeout: float = 30.0):
        super().__init__(timeout=timeout)
        self.access_token = access_token
        self.person_urn = person_urn

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "X-Restli-Protocol-Version": "2.0.0",
            "LinkedIn-Version": LINKEDIN_API_VERSION,
        }

    async def get_profile(self) -> Dict[str, Any]:
        data = await self._get_json(
            LINKEDIN_USERINFO_URL,
            "Failed to fetch LinkedIn profile",
            headers={"Authorization": f"Bearer {self.access_token}"},
        )
        return {
            "sub": data.get("sub"),
            "name": data.get("name"),
            "given_name": data.get("given_name"),
            "family_name": data.get("family_name"),
            "email": data.get("email"),
            "email_verified": data.get("email_verified"),
            "picture": data.get("picture"),
            "locale": data.get("locale"),
        }

    async def create_post(
        self,
        text: str,
        article_url: Optional[str] = None,
        article_title: Optional[str] = None,
        article_description: Optional[str] = None,
        visibility: str = "PUBLIC",
    ) -> Dict[str, Any]:
        if not text:
            raise ValidationError("Post text is required")
        if len(text) > PlatformLimit.LINKEDIN:
            raise ValidationError("Post text cannot exceed 3,000 characters")
        if not self.person_urn:
            raise ValidationError("LinkedIn person URN is required")

        body: Dict[str, Any] = {
            "author": to_person_urn(self.person_urn),
            "commentary": text,
            "visibility": visibility,
            "distribution": {
                "feedDistribution": "MAIN_FEED",
                "targetEntities": [],
                "thirdPartyDistributionChannels": [],
            },
            "lifecycleState": "PUBLISHED",
            "isReshareDisabledByAuthor": False,
        }
        if article_url:
            body["content"] = {
                "article": {
                    "source": article_url,
                    "title": article_title or "",
                    "description": article_description or "",
                }
            }

        response = await self._request(
            "POST",
            LINKEDIN_POSTS_URL,
            "Failed to create LinkedIn post",
            json=body,
            headers=self._headers(),
        )

        post_id = response.headers.get("x-restli-id") or ""
        if not post_id and response.content:
            try:
                post_id = response.json().get("id") or ""
            except ValueError:
                post_id = ""

        logger.info("linkedin_post_created", post_id=post_id)
        return {
            "id": post_id,
            "post_url": f"https://www.linkedin.com/feed/update/{post_id}",
        }
