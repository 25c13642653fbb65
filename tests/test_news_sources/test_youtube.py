import json

import pytest
from unittest.mock import MagicMock

from src.exceptions import NotFoundError, ScrapingError, ValidationError
from src.services.news_sources.youtube import (
    YouTubeAdapter,
    extract_caption_tracks,
    format_duration,
    parse_json3_captions,
    parse_xml_captions,
    select_caption_track,
)


def _response(text="", json_data=None, content=b""):
    response = MagicMock()
    response.text = text
    response.content = content
    response.json = MagicMock(return_value=json_data)
    return response


WATCH_PAGE = (
    '<html><head><meta name="title" content="Page title">'
    '<meta name="description" content="A keynote."></head><body><script>'
    'var ytInitialPlayerResponse = {"videoDetails": {"lengthSeconds":"3725","ownerChannelName":"Lab"},'
    '"captions": {"captionTracks": '
    + json.dumps([
        {"baseUrl": "https://www.youtube.com/api/timedtext?v=abc&lang=en&kind=asr", "languageCode": "en", "kind": "asr"},
        {"baseUrl": "https://www.youtube.com/api/timedtext?v=abc&lang=en", "languageCode": "en"},
    ])
    + '}};</script></body></html>'
)


class TestYouTubeHelpers:
    def test_format_duration(self):
        assert format_duration(59) == "0:59"
        assert format_duration(3725) == "1:02:05"

    def test_select_caption_track_prefers_manual_korean(self):
        tracks = [
            {"languageCode": "ko", "kind": "asr"},
            {"languageCode": "en"},
            {"languageCode": "ko"},
        ]
        assert select_caption_track(tracks) == {"languageCode": "ko"}
        assert select_caption_track([{"languageCode": "fr"}, {"languageCode": "en", "kind": "asr"}]) == {
            "languageCode": "en", "kind": "asr"
        }
        assert select_caption_track([{"languageCode": "de"}]) == {"languageCode": "de"}
        assert select_caption_track([]) is None

    def test_parse_captions(self):
        data = {"events": [{"segs": [{"utf8": "Hello "}, {"utf8": "world"}]}, {"segs": [{"utf8": "\n"}]}, {}]}
        assert parse_json3_captions(data) == "Hello world"
        xml = '<transcript><text start="0">First</text><text start="1">second &amp; last</text></transcript>'
        assert parse_xml_captions(xml) == "First second & last"

    def test_extract_caption_tracks(self):
        assert len(extract_caption_tracks(WATCH_PAGE)) == 2
        assert extract_caption_tracks("<html></html>") == []


class TestYouTubeAdapter:
    @pytest.fixture(autouse=True)
    def setup_adapter(self):
        self.adapter = YouTubeAdapter()

    def test_get_video(self):
        responses = {
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ": _response(text=WATCH_PAGE),
            "https://www.youtube.com/oembed": _response(json_data={"title": "Keynote", "author_name": "Lab Channel"}),
            "https://www.youtube.com/api/timedtext?v=abc&lang=en&fmt=json3": _response(
                json_data={"events": [{"segs": [{"utf8": "Welcome everyone"}]}]}
            ),
        }
        self.adapter.fetch = MagicMock(side_effect=lambda url, **kwargs: responses[url])

        video = self.adapter.get_video("https://youtu.be/dQw4w9WgXcQ")

        assert video == {
            "video_id": "dQw4w9WgXcQ",
            "title": "Keynote",
            "description": "A keynote.",
            "thumbnail": "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
            "channel_name": "Lab Channel",
            "duration": "1:02:05",
            "transcript": "Welcome everyone",
        }

    def test_get_video_without_captions(self):
        def fetch(url, **kwargs):
            if "oembed" in url:
                raise ScrapingError("HTTP 401")
            return _response(text="<html></html>")
        self.adapter.fetch = MagicMock(side_effect=fetch)

        with pytest.raises(NotFoundError):
            self.adapter.get_video("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    def test_get_video_invalid_url(self):
        with pytest.raises(ValidationError):
            self.adapter.get_video("https://vimeo.com/123")

    def test_resolve_channel_id(self):
        channel_id = "UC" + "a" * 22
        assert self.adapter.resolve_channel_id(f"https://www.youtube.com/channel/{channel_id}") == channel_id

        self.adapter.fetch = MagicMock(return_value=_response(text=f'{{"externalId":"{channel_id}"}}'))
        assert self.adapter.resolve_channel_id("https://www.youtube.com/@lab") == channel_id
        self.adapter.fetch.assert_called_once_with("https://www.youtube.com/@lab")

        self.adapter.fetch = MagicMock(return_value=_response(text="nothing here"))
        with pytest.raises(NotFoundError):
            self.adapter.resolve_channel_id("https://www.youtube.com/@lab")

    def test_collect_channel_videos(self):
        channel_id = "UC" + "b" * 22
        feed = f"""<?xml version="1.0" encoding="UTF-8"?>
        <feed xmlns="http://www.w3.org/2005/Atom" xmlns:yt="http://www.youtube.com/xml/schemas/2015">
          <title>Lab</title>
          <entry>
            <yt:videoId>vid00000001</yt:videoId>
            <title>Episode 1</title>
            <link rel="alternate" href="https://www.youtube.com/watch?v=vid00000001"/>
            <published>2026-01-03T12:00:00+00:00</published>
          </entry>
        </feed>""".encode("utf-8")
        self.adapter.fetch = MagicMock(return_value=_response(content=feed))

        articles = self.adapter.collect(f"https://www.youtube.com/channel/{channel_id}")

        assert len(articles) == 1
        assert articles[0].title == "Episode 1"
        assert articles[0].url == "https://www.youtube.com/watch?v=vid00000001"
        assert articles[0].media_urls == ["https://img.youtube.com/vi/vid00000001/maxresdefault.jpg"]
        assert articles[0].date_text == "2026-01-03T12:00:00+00:00"
