import pytest
from unittest.mock import AsyncMock

from src.exceptions import ServiceNotConfiguredError, ValidationError
from src.services.news_sources.browser_scraper import (
    BrowserScraper,
    is_twitter_status_url,
    parse_threads_html,
    parse_threads_profile_html,
    parse_tweet_html,
)


TWEET_HTML = """
<article>
  <div data-testid="User-Name"><a href="/openai"><span>OpenAI</span></a><span>@OpenAI</span></div>
  <div data-testid="tweetText">Introducing our newest model</div>
  <div data-testid="tweetPhoto"><img src="https://pbs.twimg.com/media/abc?format=jpg&name=small"></div>
  <div data-testid="tweetPhoto"><img src="https://abs.twimg.com/emoji/v2/1f680.svg"></div>
  <video poster="https://pbs.twimg.com/poster.jpg" src="blob:https://x.com/123"></video>
  <time datetime="2026-01-05T17:00:00.000Z">Jan 5</time>
  <button data-testid="like" aria-label="1,234 Likes. Like"></button>
  <button data-testid="retweet" aria-label="56 reposts. Repost"></button>
</article>
"""

THREADS_HTML = """
<html><head>
  <title>Mark (@zuck) on Threads</title>
  <meta property="og:description" content="@zuck: fallback description text">
  <meta property="og:image" content="https://static.threads.net/threads-app-icon.png">
</head><body>
  <article>
    <a href="/@zuck"><span>Mark Zuckerberg</span></a>
    <span>12 likes</span>
    <span>Our new glasses ship next week to everyone who preordered</span>
    <img src="https://scontent.cdninstagram.com/v/photo.jpg">
    <img src="https://scontent.cdninstagram.com/v/profile_pic.jpg">
  </article>
  <div>1.2K likes</div>
  <div>34 replies</div>
  <time datetime="2026-01-06T08:00:00Z"></time>
</body></html>
"""


THREADS_PROFILE_HTML = """
<html><head>
  <title>Ignored title</title>
  <meta property="og:title" content="Anthropic (@anthropic) on Threads">
  <meta property="og:description" content="AI safety and research company">
</head><body>
  <header><img src="https://scontent.cdninstagram.com/v/profile_pic.jpg"></header>
  <article>
    <a href="/@anthropic/post/AAA"><time datetime="2026-01-07T10:00:00Z">2h</time></a>
    <span>2 hours</span>
    <span>Reply</span>
    <span>Introducing a new family of models today</span>
    <img src="https://scontent.fbcdn.net/v/launch.jpg">
    <img src="https://scontent.cdninstagram.com/v/avatar_small.jpg">
    <div>3.4K likes</div>
    <div>120 replies</div>
  </article>
  <div role="article">
    <a href="https://www.threads.net/@anthropic/post/AAA">dup</a>
    <span>The same post rendered a second time</span>
  </div>
  <article>
    <a href="/@anthropic/post/BBB">1d</a>
    <span>Our interpretability paper is out now</span>
  </article>
  <article>
    <a href="/@anthropic/post/CCC">2d</a>
    <span>short</span>
  </article>
</body></html>
"""

class TestParseTweet:
    def test_parse_tweet_html(self):
        result = parse_tweet_html(TWEET_HTML)

        assert result == {
            "author": "@OpenAI",
            "author_name": "OpenAI",
            "content": "Introducing our newest model",
            "media_urls": [
                "https://pbs.twimg.com/media/abc?format=jpg&name=large",
                "https://pbs.twimg.com/poster.jpg",
            ],
            "timestamp": "2026-01-05T17:00:00.000Z",
            "likes": 1234,
            "retweets": 56,
        }

    def test_empty_page(self):
        result = parse_tweet_html("<html></html>")
        assert result["content"] == ""
        assert result["media_urls"] == []
        assert result["likes"] == 0

    def test_is_twitter_status_url(self):
        assert is_twitter_status_url("https://x.com/openai/status/1")
        assert is_twitter_status_url("https://twitter.com/openai/status/1")
        assert not is_twitter_status_url("https://x.com/openai")
        assert not is_twitter_status_url("")


class TestParseThreads:
    def test_parse_threads_html(self):
        url = "https://www.threads.net/@zuck/post/C1a2b3"
        result = parse_threads_html(THREADS_HTML, url)

        assert result["author"] == "@zuck"
        assert result["author_name"] == "Mark Zuckerberg"
        assert result["content"] == "Our new glasses ship next week to everyone who preordered"
        assert result["media_urls"] == ["https://scontent.cdninstagram.com/v/photo.jpg"]
        assert result["likes"] == 1200
        assert result["replies"] == 34
        assert result["timestamp"] == "2026-01-06T08:00:00Z"
        assert result["url"] == url

    def test_falls_back_to_og_description_and_url_author(self):
        html = '<html><head><meta property="og:description" content="Short post body here"></head></html>'
        result = parse_threads_html(html, "https://www.threads.net/@someone/post/XYZ")

        assert result["content"] == "Short post body here"
        assert result["author"] == "@someone"
        assert result["author_name"] == "someone"
        assert result["likes"] is None


class TestBrowserScraper:
    @pytest.mark.asyncio
    async def test_render_requires_token(self):
        with pytest.raises(ServiceNotConfiguredError):
            await BrowserScraper(token=None).render("https://x.com/a/status/1")

    @pytest.mark.asyncio
    async def test_scrape_tweet_rejects_non_status_url(self):
        with pytest.raises(ValidationError):
            await BrowserScraper(token="t").scrape_tweet("https://x.com/openai")

    @pytest.mark.asyncio
    async def test_scrape_threads_rejects_other_hosts(self):
        with pytest.raises(ValidationError):
            await BrowserScraper(token="t").scrape_threads_post("https://example.com/@a/post/1")

    @pytest.mark.asyncio
    async def test_scrape_threads_profile_validates_input(self):
        scraper = BrowserScraper(token="t")
        with pytest.raises(ValidationError):
            await scraper.scrape_threads_profile("https://www.threads.net/anthropic")
        with pytest.raises(ValidationError):
            await scraper.scrape_threads_profile("https://www.threads.net/@anthropic", limit=21)

    @pytest.mark.asyncio
    async def test_scrape_threads_profile_renders_with_scroll(self):
        scraper = BrowserScraper(token="t")
        scraper.render = AsyncMock(return_value=THREADS_PROFILE_HTML)

        result = await scraper.scrape_threads_profile("https://www.threads.net/@anthropic?hl=en", limit=1)

        assert result["username"] == "@anthropic"
        assert result["posts_count"] == 1
        assert scraper.render.await_args.kwargs["scroll"] is True


class TestParseThreadsProfile:
    def test_profile_and_posts(self):
        result = parse_threads_profile_html(THREADS_PROFILE_HTML, "anthropic")

        assert result["username"] == "@anthropic"
        assert result["display_name"] == "Anthropic"
        assert result["bio"] == "AI safety and research company"
        assert result["profile_picture"] == "https://scontent.cdninstagram.com/v/profile_pic.jpg"
        assert result["posts_count"] == 2
        first, second = result["posts"]
        assert first == {
            "post_url": "https://www.threads.net/@anthropic/post/AAA",
            "content": "Introducing a new family of models today",
            "author": "@anthropic",
            "author_name": "Anthropic",
            "timestamp": "2026-01-07T10:00:00Z",
            "media_urls": ["https://scontent.fbcdn.net/v/launch.jpg"],
            "likes": 3400,
            "replies": 120,
        }
        assert second["post_url"] == "https://www.threads.net/@anthropic/post/BBB"
        assert second["timestamp"] is None

    def test_limit(self):
        result = parse_threads_profile_html(THREADS_PROFILE_HTML, "anthropic", limit=1)
        assert [p["post_url"] for p in result["posts"]] == ["https://www.threads.net/@anthropic/post/AAA"]

    def test_follower_description_is_not_a_bio(self):
        html = """
        <html><head>
          <meta property="og:description" content="12K Followers • 40 Threads">
        </head><body>
          <div><a href="/@someone/post/XYZ">link</a><span>Post text found next to the link</span></div>
        </body></html>
        """
        result = parse_threads_profile_html(html, "someone")

        assert result["bio"] is None
        assert result["display_name"] == "someone"
        assert result["posts"] == [{
            "post_url": "https://www.threads.net/@someone/post/XYZ",
            "content": "Post text found next to the link",
            "author": "@someone",
            "author_name": "someone",
            "timestamp": None,
            "media_urls": [],
            "likes": None,
            "replies": None,
        }]
