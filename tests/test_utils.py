import pytest

from src.exceptions import ValidationError
from src.utils.string_utils import char_display_width, parse_compact_number, strip_html, truncate_text
from src.utils.url_utils import (
    extract_youtube_channel,
    extract_youtube_video_id,
    is_valid_url,
    resolve_url,
    validate_url,
)


class TestStringUtils:
    def test_strip_html(self):
        assert strip_html('<p>Hello <img src="x.png"/><b>world</b> &amp; more</p>') == "Hello world & more"
        assert strip_html("") == ""

    def test_truncate_text(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("a" * 20, 10) == "aaaaaaa..."

    def test_char_display_width(self):
        assert char_display_width("a") == 1
        assert char_display_width("한") == 2

    @pytest.mark.parametrize("text,expected", [
        ("1.2K", 1200),
        ("3M", 3000000),
        ("1,024", 1024),
        ("56", 56),
        ("", None),
        ("likes", None),
    ])
    def test_parse_compact_number(self, text, expected):
        assert parse_compact_number(text) == expected


class TestUrlUtils:
    def test_is_valid_url(self):
        assert is_valid_url("https://openai.com/blog")
        assert is_valid_url("http://localhost:8000/feed")
        assert not is_valid_url("ftp://example.com")
        assert not is_valid_url("not a url")
        assert not is_valid_url("")

    def test_validate_url_raises(self):
        with pytest.raises(ValidationError):
            validate_url("example")

    def test_resolve_url(self):
        assert resolve_url("https://example.com/blog/", "/post/1") == "https://example.com/post/1"

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        "dQw4w9WgXcQ",
    ])
    def test_extract_youtube_video_id(self, url):
        assert extract_youtube_video_id(url) == "dQw4w9WgXcQ"

    def test_extract_youtube_channel(self):
        assert extract_youtube_channel("https://www.youtube.com/channel/UC123abc") == ("id", "UC123abc")
        assert extract_youtube_channel("https://www.youtube.com/@OpenAI") == ("handle", "OpenAI")
        assert extract_youtube_channel("https://example.com") is None
