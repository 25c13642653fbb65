import re
from urllib.parse import urljoin
from typing import Optional

from ..exceptions import ValidationError


URL_PATTERN = re.compile(
    r'^https?://'
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|'
    r'localhost|'
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'
    r'(?::\d+)?'
    r'(?:/?|[/?#]\S+)$', re.IGNORECASE
)

YOUTUBE_VIDEO_PATTERNS = [
    r'(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/|youtube\.com/shorts/)([a-zA-Z0-9_-]{11})',
    r'^([a-zA-Z0-9_-]{11})$',
]

YOUTUBE_CHANNEL_PATTERNS = [
    (r'youtube\.com/channel/([a-zA-Z0-9_-]+)', 'id'),
    (r'youtube\.com/@([a-zA-Z0-9_.-]+)', 'handle'),
    (r'youtube\.com/c/([a-zA-Z0-9_-]+)', 'user'),
    (r'youtube\.com/user/([a-zA-Z0-9_-]+)', 'user'),
]


def is_valid_url(url: str) -> bool:
    return bool(url) and bool(URL_PATTERN.match(url))


def validate_url(url: str) -> None:
    if not is_valid_url(url):
        raise ValidationError(f"Invalid URL: {url}")


def resolve_url(base_url: str, href: str) -> str:
    return urljoin(base_url, href)


def extract_youtube_video_id(url: str) -> Optional[str]:
    for pattern in YOUTUBE_VIDEO_PATTERNS:
        match = re.search(pattern, url)
        if match:
            return match.group(1)
    return None


def extract_youtube_channel(url: str) -> Optional[tuple]:
    """Return (kind, value) where kind is 'id', 'handle' or 'user'."""
    for pattern, kind in YOUTUBE_CHANNEL_PATTERNS:
        match = re.search(pattern, url)
        if match:
            return kind, match.group(1)
    return None
