import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from src.exceptions import (
    NotFoundError,
    ScrapeTimeoutError,
    ScrapingError,
    ServiceNotConfiguredError,
    ValidationError,
)


@pytest.fixture
def mock_browser_scraper():
    from src.main import app
    from src.api.dependencies import get_browser_scraper

    scraper = MagicMock()
    scraper.scrape_tweet = AsyncMock()
    scraper.scrape_threads_post = AsyncMock()
    scraper.scrape_threads_profile = AsyncMock()
    app.dependency_overrides[get_browser_scraper] = lambda: scraper
    yield scraper
    app.dependency_overrides.pop(get_browser_scraper, None)


class TestRSSAPI:
    @pytest.mark.asyncio
    async def test_read_feed(self, async_client):
        feed = {
            "title": "OpenAI",
            "description": "News",
            "items": [{
                "title": "GPT-5",
                "link": "https://openai.com/blog/gpt-5",
                "pub_date": "Mon, 05 Jan 2026 10:00:00 GMT",
                "iso_date": "2026-01-05T10:00:00+00:00",
                "content": "<p>Body</p>",
                "content_snippet": "Body",
            }],
        }
        with patch("src.api.v1.endpoints.rss.RSSReader") as reader_cls:
            reader_cls.return_value.read = MagicMock(return_value=feed)
            response = await async_client.post("/api/v1/rss", json={"url": "https://openai.com/blog/rss.xml"})

        assert response.status_code == 200
        assert response.json()["items"][0]["content_snippet"] == "Body"

    @pytest.mark.asyncio
    async def test_missing_url(self, async_client):
        response = await async_client.post("/api/v1/rss", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "URL is required"

    @pytest.mark.asyncio
    async def test_parse_failure(self, async_client):
        with patch("src.api.v1.endpoints.rss.RSSReader") as reader_cls:
            reader_cls.return_value.read = MagicMock(side_effect=ScrapingError("bad xml"))
            response = await async_client.post("/api/v1/rss", json={"url": "https://example.com/feed"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to parse RSS feed"


class TestScrapeAPI:
    @pytest.mark.asyncio
    async def test_scrape_article(self, async_client):
        with patch("src.api.v1.endpoints.scrape.ArticleScraper") as scraper_cls:
            scraper_cls.return_value.scrape = MagicMock(
                return_value={"title": "T", "content": "Body", "url": "https://example.com/a"}
            )
            response = await async_client.post("/api/v1/scrape", json={"url": "https://example.com/a"})
        assert response.status_code == 200
        assert response.json()["content"] == "Body"

    @pytest.mark.asyncio
    async def test_scrape_article_timeout(self, async_client):
        with patch("src.api.v1.endpoints.scrape.ArticleScraper") as scraper_cls:
            scraper_cls.return_value.scrape = MagicMock(side_effect=ScrapeTimeoutError("slow"))
            response = await async_client.post("/api/v1/scrape", json={"url": "https://example.com/a"})
        assert response.status_code == 408
        assert response.json()["detail"] == "Request timeout - site took too long to respond"

    @pytest.mark.asyncio
    async def test_scrape_source_passes_config(self, async_client):
        listing = {
            "articles": [{"title": "A", "link": "https://example.com/news/a"}],
            "count": 1,
            "url": "https://example.com/news",
        }
        with patch("src.api.v1.endpoints.scrape.ListingScraper") as scraper_cls:
            scraper_cls.return_value.scrape = MagicMock(return_value=listing)
            response = await async_client.post(
                "/api/v1/scrape-source",
                json={"url": "https://example.com/news", "config": {"article_selector": "article"}}
            )

        assert response.status_code == 200
        assert response.json()["count"] == 1
        url, config = scraper_cls.return_value.scrape.call_args.args
        assert url == "https://example.com/news"
        assert config["article_selector"] == "article"

    @pytest.mark.asyncio
    async def test_scrape_social(self, async_client):
        preview = {
            "platform": "youtube",
            "type": "video",
            "title": "Demo",
            "author": "Channel",
            "thumbnail": "https://img.youtube.com/vi/abc/hqdefault.jpg",
            "url": "https://youtu.be/abc",
        }
        with patch("src.api.v1.endpoints.scrape.SocialPreviewScraper") as scraper_cls:
            scraper_cls.return_value.preview = AsyncMock(return_value=preview)
            response = await async_client.post("/api/v1/scrape-social", json={"url": "https://youtu.be/abc"})
        assert response.status_code == 200
        assert response.json()["platform"] == "youtube"

    @pytest.mark.asyncio
    async def test_scrape_twitter(self, async_client, mock_browser_scraper):
        mock_browser_scraper.scrape_tweet.return_value = {
            "author": "openai",
            "author_name": "OpenAI",
            "content": "We shipped",
            "media_urls": [],
            "timestamp": None,
            "likes": 10,
            "retweets": 2,
        }
        response = await async_client.post("/api/v1/scrape/twitter", json={"url": "https://x.com/openai/status/1"})
        assert response.status_code == 200
        assert response.json()["likes"] == 10

    @pytest.mark.asyncio
    async def test_scrape_threads_empty_result(self, async_client, mock_browser_scraper):
        mock_browser_scraper.scrape_threads_post.return_value = {
            "author": "", "author_name": "", "content": "", "media_urls": [], "url": "https://threads.net/@a/post/1",
        }
        response = await async_client.post(
            "/api/v1/scrape/threads", json={"url": "https://threads.net/@a/post/1"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_browser_errors(self, async_client, mock_browser_scraper):
        mock_browser_scraper.scrape_tweet.side_effect = ValidationError("Invalid Twitter/X URL")
        assert (await async_client.post("/api/v1/scrape/twitter", json={"url": "https://example.com"})).status_code == 400

        mock_browser_scraper.scrape_tweet.side_effect = ServiceNotConfiguredError("Browser service is not configured")
        assert (await async_client.post("/api/v1/scrape/twitter", json={"url": "https://x.com/a/status/1"})).status_code == 503

    @pytest.mark.asyncio
    async def test_scrape_threads_profile(self, async_client, mock_browser_scraper):
        post = {
            "post_url": "https://www.threads.net/@anthropic/post/AAA",
            "content": "Introducing a new family of models today",
            "author": "@anthropic",
            "author_name": "Anthropic",
            "timestamp": None,
            "media_urls": [],
            "likes": 3400,
            "replies": None,
        }
        mock_browser_scraper.scrape_threads_profile.return_value = {
            "username": "@anthropic",
            "display_name": "Anthropic",
            "bio": None,
            "profile_picture": None,
            "posts": [post],
            "posts_count": 1,
        }

        response = await async_client.post(
            "/api/v1/scrape/threads/profile", json={"url": "https://www.threads.net/@anthropic", "limit": 5}
        )

        assert response.status_code == 200
        assert response.json()["posts"] == [post]
        mock_browser_scraper.scrape_threads_profile.assert_awaited_once_with(
            "https://www.threads.net/@anthropic", limit=5
        )

    @pytest.mark.asyncio
    async def test_scrape_threads_profile_errors(self, async_client, mock_browser_scraper):
        url = "https://www.threads.net/@private"
        mock_browser_scraper.scrape_threads_profile.return_value = {
            "username": "@private", "display_name": "private", "bio": None,
            "profile_picture": None, "posts": [], "posts_count": 0,
        }
        empty = await async_client.post("/api/v1/scrape/threads/profile", json={"url": url})
        assert empty.status_code == 404
        assert empty.json()["detail"].startswith("No posts found")

        too_many = await async_client.post("/api/v1/scrape/threads/profile", json={"url": url, "limit": 21})
        assert too_many.status_code == 400

        mock_browser_scraper.scrape_threads_profile.side_effect = ScrapeTimeoutError("slow")
        assert (await async_client.post("/api/v1/scrape/threads/profile", json={"url": url})).status_code == 408

        mock_browser_scraper.scrape_threads_profile.side_effect = ServiceNotConfiguredError("not configured")
        assert (await async_client.post("/api/v1/scrape/threads/profile", json={"url": url})).status_code == 503


class TestYouTubeAPI:
    @pytest.mark.asyncio
    async def test_video(self, async_client):
        video = {
            "video_id": "dQw4w9WgXcQ",
            "title": "Keynote",
            "description": "",
            "thumbnail": "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
            "channel_name": "Lab",
            "duration": "",
            "transcript": "hello",
        }
        with patch("src.api.v1.endpoints.youtube.YouTubeAdapter") as adapter_cls:
            adapter_cls.return_value.get_video = MagicMock(return_value=video)
            response = await async_client.post(
                "/api/v1/youtube", json={"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"}
            )
        assert response.status_code == 200
        assert response.json()["transcript"] == "hello"

    @pytest.mark.asyncio
    async def test_video_without_captions(self, async_client):
        with patch("src.api.v1.endpoints.youtube.YouTubeAdapter") as adapter_cls:
            adapter_cls.return_value.get_video = MagicMock(side_effect=NotFoundError("No captions available"))
            response = await async_client.post("/api/v1/youtube", json={"url": "https://youtu.be/dQw4w9WgXcQ"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_channel_limit_bounds(self, async_client):
        response = await async_client.post(
            "/api/v1/youtube/channel", json={"url": "https://www.youtube.com/@lab", "limit": 51}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_channel_videos(self, async_client):
        channel = {"channel_id": "UC123", "channel_title": "Lab", "videos": []}
        with patch("src.api.v1.endpoints.youtube.YouTubeAdapter") as adapter_cls:
            adapter_cls.return_value.get_channel_videos = MagicMock(return_value=channel)
            response = await async_client.post(
                "/api/v1/youtube/channel", json={"url": "https://www.youtube.com/@lab", "limit": 5}
            )
        assert response.status_code == 200
        adapter_cls.return_value.get_channel_videos.assert_called_once_with("https://www.youtube.com/@lab", 5)
