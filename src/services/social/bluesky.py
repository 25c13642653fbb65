"""
Bluesky client over raw AT Protocol XRPC calls.
Authenticates with an app password and writes app.bsky.feed.post records.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from ...api.v1.constants import PlatformLimit
from ...exceptions import SocialAuthError, SocialPlatformError, ValidationError
from ...models.enums import Platform
from .base import SocialClient

logger = structlog.get_logger(__name__)

BLUESKY_XRPC_URL = "https://bsky.social/xrpc"
POST_COLLECTION = "app.bsky.feed.post"

INVALID_CREDENTIALS_MESSAGE = "Invalid handle or app password. Please check your credentials."
NOT_AUTHENTICATED_MESSAGE = "Not authenticated. Please login first."

URL_REGEX = re.compile(
    rb"(?:^|[^\w])(https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    rb"(?:[-a-zA-Z0-9()@:%_+.~#?&/=]*[-a-zA-Z0-9@%_+~#/=])?)"
)
MENTION_REGEX = re.compile(
    rb"(?:^|[^\w])(@(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)"
)
HASHTAG_REGEX = re.compile(rb"(?:^|\s)(#[^\d\s][^\s]*)")
TRAILING_PUNCTUATION = b".,;:!?)"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_links(text: str) -> List[Dict[str, Any]]:
    """Link spans as UTF-8 byte offsets"""
    spans = []
    for match in URL_REGEX.finditer(text.encode("utf-8")):
        spans.append({
            "start": match.start(1),
            "end": match.end(1),
            "url": match.group(1).decode("utf-8"),
        })
    return spans


def parse_mentions(text: str) -> List[Dict[str, Any]]:
    spans = []
    for match in MENTION_REGEX.finditer(text.encode("utf-8")):
        spans.append({
            "start": match.start(1),
            "end": match.end(1),
            "handle": match.group(1)[1:].decode("utf-8"),
        })
    return spans


def parse_hashtags(text: str) -> List[Dict[str, Any]]:
    spans = []
    for match in HASHTAG_REGEX.finditer(text.encode("utf-8")):
        tag = match.group(1).rstrip(TRAILING_PUNCTUATION)
        if len(tag) <= 1:
            continue
        start = match.start(1)
        spans.append({"start": start, "end": start + len(tag), "tag": tag[1:].decode("utf-8")})
    return spans


def post_url_from_uri(uri: str, handle: str) -> str:
    rkey = uri.rsplit("/", 1)[-1]
    return f"https://bsky.app/profile/{handle}/post/{rkey}"


class BlueskyClient(SocialClient):
    platform = Platform.BLUESKY.value

    def __init__(self, service_url: str = BLUESKY_XRPC_URL, timeout: float = 30.0):
        super().__init__(timeout=timeout)
        self.service_url = service_url
        self.access_jwt: Optional[str] = None
        self.did: Optional[str] = None
        self.handle: Optional[str] = None

    def _xrpc(self, method: str) -> str:
        return f"{self.service_url}/{method}"

    def _auth_headers(self) -> Dict[str, str]:
        if not self.access_jwt:
            raise SocialAuthError(NOT_AUTHENTICATED_MESSAGE, platform=self.platform)
        return {"Authorization": f"Bearer {self.access_jwt}"}

    @property
    def is_logged_in(self) -> bool:
        return bool(self.access_jwt and self.did)

    async def login(self, identifier: str, app_password: str) -> Dict[str, Any]:
        identifier = (identifier or "").strip()
        if not identifier or not app_password:
            raise ValidationError("Identifier and app password are required")
        if "." not in identifier and "@" not in identifier:
            raise ValidationError("Invalid identifier. Use your handle (e.g. user.bsky.social) or email.")

        try:
            session = await self._post_json(
                self._xrpc("com.atproto.server.createSession"),
                "Authentication failed",
                json={"identifier": identifier, "password": app_password},
            )
        except SocialPlatformError as e:
            if e.status_code in (400, 401) or "Invalid identifier or password" in e.message:
                raise SocialAuthError(INVALID_CREDENTIALS_MESSAGE, platform=self.platform, status_code=e.status_code)
            if "Account not found" in e.message:
                raise SocialAuthError("Account not found. Please check your handle.", platform=self.platform)
            raise

        self.access_jwt = session.get("accessJwt")
        self.did = session.get("did")
        self.handle = session.get("handle")
        logger.info("bluesky_logged_in", handle=self.handle)
        return await self.get_profile()

    async def get_profile(self) -> Dict[str, Any]:
        data = await self._get_json(
            self._xrpc("app.bsky.actor.getProfile"),
            "Failed to get profile",
            params={"actor": self.did},
            headers=self._auth_headers(),
        )
        return {
            "did": data.get("did", self.did),
            "handle": data.get("handle", self.handle),
            "display_name": data.get("displayName"),
            "avatar": data.get("avatar"),
        }

    async def resolve_handle(self, handle: str) -> Optional[str]:
        try:
            data = await self._get_json(
                self._xrpc("com.atproto.identity.resolveHandle"),
                "Failed to resolve handle",
                params={"handle": handle},
            )
        except SocialPlatformError as e:
            logger.info("bluesky_mention_unresolved", handle=handle, error=e.message)
            return None
        return data.get("did")

    async def detect_facets(self, text: str) -> List[Dict[str, Any]]:
        facets = []
        for mention in parse_mentions(text):
            did = await self.resolve_handle(mention["handle"])
            if not did:
                continue
            facets.append({
                "index": {"byteStart": mention["start"], "byteEnd": mention["end"]},
                "features": [{"$type": "app.bsky.richtext.facet#mention", "did": did}],
            })
        for link in parse_links(text):
            facets.append({
                "index": {"byteStart": link["start"], "byteEnd": link["end"]},
                "features": [{"$type": "app.bsky.richtext.facet#link", "uri": link["url"]}],
            })
        for tag in parse_hashtags(text):
            facets.append({
                "index": {"byteStart": tag["start"], "byteEnd": tag["end"]},
                "features": [{"$type": "app.bsky.richtext.facet#tag", "tag": tag["tag"]}],
            })
        return facets

    async def create_post(
        self,
        text: str,
        link_url: Optional[str] = None,
        reply_to: Optional[Dict[str, str]] = None,
        link_title: Optional[str] = None,
        link_description: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = self._auth_headers()
        if not text or not text.strip():
            raise ValidationError("Post text is required")
        if len(text) > PlatformLimit.BLUESKY:
            raise ValidationError(f"Post text cannot exceed {PlatformLimit.BLUESKY} characters")

        record: Dict[str, Any] = {
            "$type": POST_COLLECTION,
            "text": text,
            "createdAt": now_iso(),
        }
        facets = await self.detect_facets(text)
        if facets:
            record["facets"] = facets
        if link_url:
            record["embed"] = {
                "$type": "app.bsky.embed.external",
                "external": {
                    "uri": link_url,
                    "title": link_title or link_url,
                    "description": link_description or "",
                },
            }
        if reply_to:
            record["reply"] = {"root": reply_to, "parent": reply_to}

        data = await self._post_json(
            self._xrpc("com.atproto.repo.createRecord"),
            "Failed to create post",
            json={"repo": self.did, "collection": POST_COLLECTION, "record": record},
            headers=headers,
        )
        uri = data.get("uri", "")
        logger.info("bluesky_post_created", uri=uri)
        return {
            "uri": uri,
            "cid": data.get("cid"),
            "post_url": post_url_from_uri(uri, self.handle or ""),
        }

    async def delete_post(self, uri: str) -> None:
        headers = self._auth_headers()
        rkey = uri.rsplit("/", 1)[-1]
        await self._request(
            "POST",
            self._xrpc("com.atproto.repo.deleteRecord"),
            "Failed to delete post",
            json={"repo": self.did, "collection": POST_COLLECTION, "rkey": rkey},
            headers=headers,
        )
        logger.info("bluesky_post_deleted", uri=uri)
