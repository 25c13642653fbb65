"""Preview metadata for YouTube, X/Twitter and Threads links via oEmbed and OpenGraph tags"""

import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx
import structlog
from bs4 import BeautifulSoup

from ...exceptions import ScrapeTimeoutError, ScrapingError, ValidationError
from .base import DESKTOP_USER_AGENTS

logger = structlog.get_logger(__name__)

USER_AGENT = DESKTOP_USER_AGENTS[0]
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"

RESERVED_X_PATHS = {'home', 'explore', 'notifications', 'messages', 'search', 'settings', 'i'}

YOUTUBE_URL_PATTERNS = [
    (re.compile(r'(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})'), 'video'),
    (re.compile(r'youtube\.com/shorts/([a-zA-Z0-9_-]{11})'), 'shorts'),
    (re.compile(r'youtube\.com/@([^/?]+)'), 'channel'),
    (re.compile(r'youtube\.com/channel/([a-zA-Z0-9_-]+)'), 'channel'),
]

X_POST_PATTERN = re.compile(r'(?:twitter\.com|x\.com)/([^/]+)/status/(\d+)')
X_PROFILE_PATTERN = re.compile(r'(?:twitter\.com|x\.com)/([^/?]+)')
THREADS_POST_PATTERN = re.compile(r'threads\.net/@([^/]+)/post/([a-zA-Z0-9_-]+)')
THREADS_PROFILE_PATTERN = re.compile(r'threads\.net/@([^/?]+)')

PLATFORM_HOSTS = {
    'youtube': {'youtube.com', 'youtu.be'},
    'twitter': {'twitter.com', 'x.com'},
    'threads': {'threads.net'},
}


def detect_platform(url: str) -> Optional[str]:
    """Platform for a URL by its host; subdomains such as www. or m. count too"""
    host = (urlparse(url if '://' in url else f'https://{url}').hostname or '').lower()
    for platform, domains in PLATFORM_HOSTS.items():
        if any(host == domain or host.endswith(f'.{domain}') for domain in domains):
            return platform
    return None


def parse_youtube_url(url: str) -> Optional[Dict[str, str]]:
    for pattern, kind in YOUTUBE_URL_PATTERNS:
        match = pattern.search(url)
        if match:
            return {"type": kind, "id": match.group(1)}
    return None


def parse_x_url(url: str) -> Optional[Dict[str, str]]:
    match = X_POST_PATTERN.search(url)
    if match:
        return {"type": "post", "username": match.group(1), "post_id": match.group(2)}

    match = X_PROFILE_PATTERN.search(url)
    if match and match.group(1) not in RESERVED_X_PATHS:
        return {"type": "profile", "username": match.group(1)}
    return None


def parse_threads_url(url: str) -> Optional[Dict[str, str]]:
    match = THREADS_POST_PATTERN.search(url)
    if match:
        return {"type": "post", "username": match.group(1), "post_id": match.group(2)}

    match = THREADS_PROFILE_PATTERN.search(url)
    if match:
        return {"type": "profile", "username": match.group(1)}
    return None


def og_tags(html: str) -> Dict[str, Optional[str]]:
    soup = BeautifulSoup(html, 'html.parser')

    def meta(**attrs) -> Optional[str]:
        tag = soup.find('meta', attrs=attrs)
        return tag.get('content') if tag else None

    return {
        "title": meta(property='og:title'),
        "description": meta(property='og:description') or meta(name='description'),
        "image": meta(property='og:image'),
    }


class SocialPreviewScraper:
    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self.headers = {
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        }

    async def preview(self, url: str, platform: Optional[str] = None) -> Dict[str, Any]:
        platform = platform or detect_platform(url)
        if platform == 'youtube':
            result = await self._youtube(url)
        elif platform == 'twitter':
            result = await self._x(url)
        elif platform == 'threads':
            result = await self._threads(url)
        else:
            raise ValidationError(
                "Could not determine source type. Please provide a valid YouTube, X, or Threads URL."
            )

        result.update({"platform": platform, "url": url})
        logger.info("social_preview_scraped", platform=platform, type=result.get("type"))
        return result

    async def _get(self, url: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url, headers=self.headers, **kwargs)
                response.raise_for_status()
                return response
        except httpx.TimeoutException:
            raise ScrapeTimeoutError(f"Timed out fetching {url}")
        except httpx.HTTPStatusError as e:
            raise ScrapingError(f"Failed to fetch: {e.response.status_code}")
        except httpx.HTTPError as e:
            raise ScrapingError(f"Failed to fetch {url}: {e}")

    async def _youtube(self, url: str) -> Dict[str, Any]:
        parsed = parse_youtube_url(url)
        if not parsed:
            raise ValidationError("Invalid YouTube URL format")

        if parsed["type"] == "channel":
            if '@' in url:
                channel_url = f"https://www.youtube.com/@{parsed['id']}"
            else:
                channel_url = f"https://www.youtube.com/channel/{parsed['id']}"
            tags = og_tags((await self._get(channel_url)).text)
            channel_name = tags["title"] or parsed["id"]
            return {
                "type": "channel",
                "title": f"YouTube Channel: {channel_name}",
                "content": tags["description"] or "",
                "author": channel_name,
                "thumbnail": tags["image"],
            }

        if parsed["type"] == "shorts":
            video_url = f"https://www.youtube.com/shorts/{parsed['id']}"
        else:
            video_url = f"https://www.youtube.com/watch?v={parsed['id']}"

        oembed = (await self._get(YOUTUBE_OEMBED_URL, params={"url": video_url, "format": "json"})).json()

        description = ""
        try:
            description = og_tags((await self._get(video_url)).text)["description"] or ""
        except ScrapingError as e:
            logger.info("youtube_description_unavailable", url=video_url, error=str(e))

        label = "Shorts" if parsed["type"] == "shorts" else "Video"
        return {
            "type": parsed["type"],
            "title": oembed.get("title"),
            "content": description or f"YouTube {label} by {oembed.get('author_name')}",
            "author": oembed.get("author_name"),
            "thumbnail": oembed.get("thumbnail_url"),
        }

    async def _x(self, url: str) -> Dict[str, Any]:
        parsed = parse_x_url(url)
        if not parsed:
            raise ValidationError("Invalid X/Twitter URL format")

        username = parsed["username"]
        if parsed["type"] == "post":
            html = (await self._get(f"https://x.com/{username}/status/{parsed['post_id']}")).text
            tags = og_tags(html)
            tweet_text = BeautifulSoup(html, 'html.parser').select_one('[data-testid="tweetText"]')
            content = tweet_text.get_text() if tweet_text else tags["description"]
            return {
                "type": "post",
                "title": tags["title"] or f"Post by @{username}",
                "content": content or "",
                "author": f"@{username}",
                "thumbnail": tags["image"],
            }

        tags = og_tags((await self._get(f"https://x.com/{username}")).text)
        return {
            "type": "profile",
            "title": f"X Profile: {tags['title'] or username}",
            "content": tags["description"] or "",
            "author": f"@{username}",
            "thumbnail": tags["image"],
        }

    async def _threads(self, url: str) -> Dict[str, Any]:
        parsed = parse_threads_url(url)
        if not parsed:
            raise ValidationError("Invalid Threads URL format")

        tags = og_tags((await self._get(url)).text)
        username = parsed["username"]
        if parsed["type"] == "post":
            title = tags["title"] or f"Threads post by @{username}"
        else:
            title = f"Threads Profile: {tags['title'] or username}"
        return {
            "type": parsed["type"],
            "title": title,
            "content": tags["description"] or "",
            "author": f"@{username}",
            "thumbnail": tags["image"],
        }
