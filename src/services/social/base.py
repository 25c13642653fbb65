"""
Base class for social platform API clients
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
import structlog

from ...exceptions import SocialAuthError, SocialPlatformError

logger = structlog.get_logger(__name__)

AUTH_ERROR_STATUSES = (401, 403)


def calculate_expires_at(expires_in: Optional[int]) -> Optional[str]:
    if not expires_in:
        return None
    return (datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))).isoformat()


def error_message(response: httpx.Response, default: str) -> str:
    """Best-effort error text from a platform JSON error body"""
    try:
        data = response.json()
    except ValueError:
        return default
    if not isinstance(data, dict):
        return default

    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    for key in ("error_message", "error_description", "message"):
        if data.get(key):
            return str(data[key])
    if isinstance(error, str) and error:
        return error
    return default


class SocialClient:
    """Thin httpx wrapper that turns platform failures into SocialPlatformError"""

    platform = ""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    async def _request(self, method: str, url: str, failure_message: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning("social_request_timeout", platform=self.platform, url=url)
            raise SocialPlatformError(f"{failure_message}: request timed out", platform=self.platform)
        except httpx.HTTPError as e:
            logger.error("social_request_failed", platform=self.platform, url=url, error=str(e))
            raise SocialPlatformError(f"{failure_message}: {e}", platform=self.platform)

        if response.status_code >= 400:
            message = error_message(response, failure_message)
            logger.warning(
                "social_api_error",
                platform=self.platform,
                status_code=response.status_code,
                message=message
            )
            error_cls = SocialAuthError if response.status_code in AUTH_ERROR_STATUSES else SocialPlatformError
            raise error_cls(message, platform=self.platform, status_code=response.status_code)

        return response

    def _parse_json(self, response: httpx.Response, failure_message: str) -> dict:
        try:
            data = response.json()
        except ValueError:
            logger.warning("social_response_not_json", platform=self.platform, status_code=response.status_code)
            raise SocialPlatformError(f"{failure_message}: unexpected response", platform=self.platform)
        if not isinstance(data, dict):
            raise SocialPlatformError(f"{failure_message}: unexpected response", platform=self.platform)
        return data

    async def _get_json(self, url: str, failure_message: str, **kwargs) -> dict:
        response = await self._request("GET", url, failure_message, **kwargs)
        return self._parse_json(response, failure_message)

    async def _post_json(self, url: str, failure_message: str, **kwargs) -> dict:
        response = await self._request("POST", url, failure_message, **kwargs)
        return self._parse_json(response, failure_message)
