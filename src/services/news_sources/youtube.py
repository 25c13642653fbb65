"""
YouTube adapter
Video metadata, caption transcripts and channel uploads (via the public videos.xml feed)
"""

import json
import re
from typing import Any, Dict, List, Optional

import feedparser
import structlog
from bs4 import BeautifulSoup

from ...exceptions import NotFoundError, ScrapingError, ValidationError
from ...utils.string_utils import clean_text
from ...utils.url_utils import extract_youtube_channel, extract_youtube_video_id
from .base import NewsSourceAdapter, CollectedArticle, DESKTOP_USER_AGENTS
from .rss_reader import entry_datetime

logger = structlog.get_logger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"
CHANNEL_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"

CAPTION_LANGUAGE_PRIORITY = ['ko', 'en']

CHANNEL_ID_PATTERNS = [
    re.compile(r'"channelId":"(UC[a-zA-Z0-9_-]{22})"'),
    re.compile(r'channel_id=(UC[a-zA-Z0-9_-]{22})'),
    re.compile(r'"externalId":"(UC[a-zA-Z0-9_-]{22})"'),
    re.compile(r'/channel/(UC[a-zA-Z0-9_-]{22})'),
    re.compile(r'"browseId":"(UC[a-zA-Z0-9_-]{22})"'),
]


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def select_caption_track(tracks: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Manual tracks before auto-generated (asr), Korean before English, else the first."""
    if not tracks:
        return None
    for want_asr in (False, True):
        for lang in CAPTION_LANGUAGE_PRIORITY:
            for track in tracks:
                if track.get('languageCode') == lang and (track.get('kind') == 'asr') == want_asr:
                    return track
    return tracks[0]


def parse_json3_captions(data: Dict[str, Any]) -> str:
    texts = []
    for event in data.get('events') or []:
        text = ''.join(seg.get('utf8', '') for seg in event.get('segs') or []).strip()
        if text:
            texts.append(text)
    return clean_text(' '.join(texts))


def parse_xml_captions(xml: str) -> str:
    soup = BeautifulSoup(xml, 'html.parser')
    texts = [node.get_text().strip() for node in soup.find_all('text')]
    return clean_text(' '.join(t for t in texts if t))


def extract_caption_tracks(html: str) -> List[Dict[str, Any]]:
    match = re.search(r'"captionTracks":\s*(\[.*?\])', html)
    if not match:
        return []
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.warning("caption_tracks_unparseable")
        return []


class YouTubeAdapter(NewsSourceAdapter):
    def __init__(self, timeout: int = 15):
        super().__init__(timeout=timeout)
        self.session.headers.update({
            'User-Agent': DESKTOP_USER_AGENTS[0],
            'Accept-Language': 'ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7',
        })

    def get_video(self, url: str) -> Dict[str, Any]:
        """Metadata and transcript of a video. NotFoundError when it has no captions."""
        video_id = extract_youtube_video_id(url or "")
        if not video_id:
            raise ValidationError("Invalid YouTube URL")

        html = self.fetch(WATCH_URL.format(video_id=video_id)).text
        metadata = self._video_metadata(video_id, html)
        transcript = self._transcript(html)
        if not transcript:
            raise NotFoundError("No captions available")

        logger.info("youtube_transcript_fetched", video_id=video_id, length=len(transcript))
        metadata["transcript"] = transcript
        return metadata

    def _video_metadata(self, video_id: str, html: str) -> Dict[str, Any]:
        title = ""
        channel_name = ""
        try:
            oembed = self.fetch(OEMBED_URL, params={"url": WATCH_URL.format(video_id=video_id), "format": "json"}).json()
            title = oembed.get("title") or ""
            channel_name = oembed.get("author_name") or ""
        except ScrapingError as e:
            logger.info("youtube_oembed_unavailable", video_id=video_id, error=str(e))

        soup = BeautifulSoup(html, 'html.parser')
        if not title:
            meta_title = soup.find('meta', attrs={'name': 'title'})
            title = meta_title.get('content', '') if meta_title else ""
        meta_desc = soup.find('meta', attrs={'name': 'description'})
        description = meta_desc.get('content', '') if meta_desc else ""

        duration = ""
        length = re.search(r'"lengthSeconds":"(\d+)"', html)
        if length:
            duration = format_duration(int(length.group(1)))

        if not channel_name:
            owner = re.search(r'"ownerChannelName":"([^"]+)"', html)
            channel_name = owner.group(1) if owner else ""

        return {
            "video_id": video_id,
            "title": title or "Unknown Title",
            "description": description,
            "thumbnail": THUMBNAIL_URL.format(video_id=video_id),
            "channel_name": channel_name or "Unknown Channel",
            "duration": duration,
        }

    def _transcript(self, html: str) -> Optional[str]:
        track = select_caption_track(extract_caption_tracks(html))
        if not track or not track.get('baseUrl'):
            return None

        base_url = track['baseUrl']
        try:
            return parse_json3_captions(self.fetch(base_url + '&fmt=json3').json())
        except (ScrapingError, ValueError) as e:
            logger.info("json3_captions_failed_trying_xml", error=str(e))
        return parse_xml_captions(self.fetch(base_url).text)

    def resolve_channel_id(self, url: str) -> str:
        info = extract_youtube_channel(url or "")
        if not info:
            raise ValidationError("Invalid YouTube channel URL")

        kind, value = info
        if kind == 'id':
            return value

        page_url = f"https://www.youtube.com/@{value}" if kind == 'handle' else f"https://www.youtube.com/c/{value}"
        html = self.fetch(page_url).text
        for pattern in CHANNEL_ID_PATTERNS:
            match = pattern.search(html)
            if match:
                return match.group(1)

        raise NotFoundError("Could not find YouTube channel ID")

    def get_channel_videos(self, url: str, limit: int = 10) -> Dict[str, Any]:
        channel_id = self.resolve_channel_id(url)
        feed = feedparser.parse(self.fetch(CHANNEL_FEED_URL.format(channel_id=channel_id)).content)

        videos = []
        for entry in feed.entries[:limit]:
            video_id = entry.get('yt_videoid')
            if not video_id:
                continue
            published = entry_datetime(entry)
            videos.append({
                "video_id": video_id,
                "title": entry.get('title', ''),
                "link": entry.get('link') or WATCH_URL.format(video_id=video_id),
                "description": entry.get('summary', ''),
                "published_at": published.isoformat() if published else None,
                "thumbnail": THUMBNAIL_URL.format(video_id=video_id),
            })

        logger.info("youtube_channel_fetched", channel_id=channel_id, videos=len(videos))
        return {
            "channel_id": channel_id,
            "channel_title": feed.feed.get('title') or 'Unknown Channel',
            "videos": videos,
        }

    def collect(self, url: str, limit: int = 10) -> List[CollectedArticle]:
        channel = self.get_channel_videos(url, limit)
        return [
            CollectedArticle(
                title=video["title"],
                url=video["link"],
                description=video["description"],
                date_text=video["published_at"],
                media_urls=[video["thumbnail"]],
            )
            for video in channel["videos"]
        ]
