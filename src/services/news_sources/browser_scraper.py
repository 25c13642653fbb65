"""
Headless browser scraping for X/Twitter posts and Threads posts and profiles.
Pages are rendered on a remote Browserless chromium over its websocket endpoint,
then parsed with BeautifulSoup.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup
from playwright.async_api import async_playwright, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from ...exceptions import ExternalServiceError, ScrapeTimeoutError, ServiceNotConfiguredError, ValidationError
from ...utils.string_utils import parse_compact_number

logger = structlog.get_logger(__name__)

TWITTER_STATUS_PATTERN = re.compile(r'^https?://(twitter\.com|x\.com)/\w+/status/\d+')
THREADS_POST_PATTERN = re.compile(r'threads\.net/@([^/]+)/post/([^/?]+)')
THREADS_PROFILE_PATTERN = re.compile(r'threads\.net/@([^/?]+)')
THREADS_BASE_URL = "https://www.threads.net"

BROWSER_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 14_2) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36'
)
VIEWPORT = {"width": 1920, "height": 1080}
LOCALE = "ko-KR"

TWEET_TEXT_WAIT_MS = 10000
THREADS_HYDRATION_WAIT_MS = 4000
THREADS_PAGE_TIMEOUT_MS = 30000
THREADS_PROFILE_TIMEOUT_MS = 45000
SCROLL_WAIT_MS = 2000

THREADS_PROFILE_MAX_POSTS = 20
PROFILE_DISPLAY_NAME = re.compile(r'^([^(@]+)')
FOLLOWER_COUNT = re.compile(r'^\d+[KMkm]?\s*(followers?|팔로워)', re.IGNORECASE)
POST_META_TEXT = re.compile(
    r'^\d+[KMkm]?\s*(likes?|replies?|좋아요|답글|hours?|minutes?|days?|시간|분|일)', re.IGNORECASE
)
POST_ACTION_TEXT = re.compile(r'^(Reply|답글|Like|좋아요|Share|공유)$', re.IGNORECASE)

ENGAGEMENT_LIKES = re.compile(r'^([\d.,]+[KMkm]?)\s*(likes?|좋아요)', re.IGNORECASE)
ENGAGEMENT_REPLIES = re.compile(r'^([\d.,]+[KMkm]?)\s*(replies?|답글|comments?)', re.IGNORECASE)
ENGAGEMENT_ONLY = re.compile(r'^\d+[KMkm]?\s*(likes?|replies?|좋아요|답글)', re.IGNORECASE)


def is_twitter_status_url(url: str) -> bool:
    return bool(url) and bool(TWITTER_STATUS_PATTERN.match(url))


def _aria_count(button, label_pattern: str) -> int:
    if not button:
        return 0
    match = re.search(r'(\d+(?:,\d+)*)\s*(?:' + label_pattern + r')', button.get('aria-label', ''), re.IGNORECASE)
    return int(match.group(1).replace(',', '')) if match else 0


def _engagement_counts(root) -> Tuple[Optional[int], Optional[int]]:
    likes: Optional[int] = None
    replies: Optional[int] = None
    for el in root.find_all(['span', 'div']):
        text = el.get_text().strip()
        match = ENGAGEMENT_LIKES.match(text)
        if match:
            likes = parse_compact_number(match.group(1))
        match = ENGAGEMENT_REPLIES.match(text)
        if match:
            replies = parse_compact_number(match.group(1))
    return likes, replies


def _threads_post_url(href: str) -> str:
    return href if href.startswith('http') else f"{THREADS_BASE_URL}{href}"


def parse_tweet_html(html: str) -> Dict[str, Any]:
    soup = BeautifulSoup(html, 'html.parser')

    text_el = soup.select_one('[data-testid="tweetText"]')
    content = text_el.get_text().strip() if text_el else ''

    author = ''
    author_name = ''
    user_el = soup.select_one('[data-testid="User-Name"]')
    if user_el:
        first_link = user_el.find('a')
        if first_link:
            author_name = first_link.get_text().strip()
        handle = re.search(r'@\w+', user_el.get_text())
        if handle:
            author = handle.group(0)

    media_urls: List[str] = []
    for img in soup.select('[data-testid="tweetPhoto"] img'):
        src = img.get('src') or ''
        if src and 'emoji' not in src and 'profile' not in src:
            media_urls.append(re.sub(r'&name=\w+', '&name=large', src))
    for video in soup.select('video'):
        if video.get('poster'):
            media_urls.append(video['poster'])
        src = video.get('src')
        if src and not src.startswith('blob:'):
            media_urls.append(src)

    time_el = soup.find('time')
    return {
        "author": author,
        "author_name": author_name,
        "content": content,
        "media_urls": list(dict.fromkeys(media_urls)),
        "timestamp": time_el.get('datetime') if time_el else None,
        "likes": _aria_count(soup.select_one('[data-testid="like"]'), 'like'),
        "retweets": _aria_count(soup.select_one('[data-testid="retweet"]'), 'repost|retweet'),
    }


def parse_threads_html(html: str, url: str) -> Dict[str, Any]:
    soup = BeautifulSoup(html, 'html.parser')
    og_desc_el = soup.find('meta', property='og:description')
    og_desc = og_desc_el.get('content', '') if og_desc_el else ''

    author = ''
    author_name = ''
    for link in soup.select('a[href*="/@"]'):
        match = re.search(r'/@([^/?]+)', link.get('href', ''))
        if match:
            author = f"@{match.group(1)}"
            text = link.get_text().strip()
            if text and not text.startswith('@'):
                author_name = text
            break
    if not author:
        match = re.search(r'@(\w+)', og_desc)
        if match:
            author = f"@{match.group(1)}"

    content = ''
    for article in soup.find_all('article'):
        for span in article.find_all('span'):
            text = span.get_text().strip()
            if len(text) > 20 and not ENGAGEMENT_ONLY.match(text):
                content = text
                break
        if content:
            break
    if not content and og_desc:
        match = re.match(r'^@\w+:\s*(.+)$', og_desc)
        content = match.group(1) if match else og_desc
    if not content and soup.title:
        match = re.search(r'on Threads:\s*["\']?(.+?)["\']?$', soup.title.get_text())
        if match:
            content = match.group(1)

    media_urls: List[str] = []
    for img in soup.select('article img'):
        src = img.get('src') or ''
        if ('cdninstagram' in src or 'fbcdn' in src) and 'profile' not in src and 'avatar' not in src:
            media_urls.append(src)
    for video in soup.select('article video source, article video[src]'):
        if video.get('src'):
            media_urls.append(video['src'])
    if not media_urls:
        og_image = soup.find('meta', property='og:image')
        image_url = og_image.get('content') if og_image else None
        if image_url and 'threads-app-icon' not in image_url:
            media_urls.append(image_url)

    likes, replies = _engagement_counts(soup)

    if not author:
        url_match = THREADS_POST_PATTERN.search(url)
        author = f"@{url_match.group(1)}" if url_match else 'unknown'

    time_el = soup.select_one('time[datetime]')
    return {
        "author": author,
        "author_name": author_name or author.lstrip('@'),
        "content": content,
        "media_urls": list(dict.fromkeys(media_urls)),
        "timestamp": time_el.get('datetime') if time_el else None,
        "likes": likes,
        "replies": replies,
        "url": url,
    }


def parse_threads_profile_html(html: str, username: str, limit: int = 10) -> Dict[str, Any]:
    """
    Extract profile details and recent posts from a rendered Threads profile page.

    Posts are read from article elements; when the page has none, bare
    /post/ links are collected instead with only their nearby text.
    """
    soup = BeautifulSoup(html, 'html.parser')

    display_name = ''
    og_title = soup.find('meta', property='og:title')
    titles = [og_title.get('content', '') if og_title else '', soup.title.get_text() if soup.title else '']
    for title in titles:
        match = PROFILE_DISPLAY_NAME.match(title)
        if match and match.group(1).strip():
            display_name = match.group(1).strip()
            break
    display_name = display_name or username

    og_desc = soup.find('meta', property='og:description')
    description = og_desc.get('content', '') if og_desc else ''
    bio = description if description and not FOLLOWER_COUNT.match(description) else None

    profile_img = soup.select_one('img[alt*="profile"], header img')
    picture = profile_img.get('src') if profile_img else None
    profile_picture = picture if picture and not picture.startswith('data:') else None

    author = f"@{username}"
    posts: List[Dict[str, Any]] = []
    seen_urls = set()

    for article in soup.select('article, [role="article"]'):
        if len(posts) >= limit:
            break
        link = article.select_one('a[href*="/post/"]')
        if not link:
            continue
        post_url = _threads_post_url(link['href'])
        if post_url in seen_urls:
            continue
        seen_urls.add(post_url)

        content = ''
        for span in article.find_all('span'):
            text = span.get_text().strip()
            if len(text) > 15 and not POST_META_TEXT.match(text) and not POST_ACTION_TEXT.match(text):
                content = text
                break

        media_urls = []
        for img in article.select('img[src*="cdninstagram"], img[src*="fbcdn"]'):
            src = img.get('src') or ''
            if 'profile' not in src and 'avatar' not in src:
                media_urls.append(src)

        if not content and not media_urls:
            continue
        likes, replies = _engagement_counts(article)
        time_el = article.select_one('time[datetime]')
        posts.append({
            "post_url": post_url,
            "content": content,
            "author": author,
            "author_name": display_name,
            "timestamp": time_el.get('datetime') if time_el else None,
            "media_urls": list(dict.fromkeys(media_urls)),
            "likes": likes,
            "replies": replies,
        })

    if not posts:
        for link in soup.select('a[href*="/post/"]'):
            if len(posts) >= limit:
                break
            post_url = _threads_post_url(link['href'])
            if post_url in seen_urls:
                continue
            seen_urls.add(post_url)

            content = ''
            parent = link.find_parent('div')
            for span in parent.find_all('span') if parent else []:
                text = span.get_text().strip()
                if len(text) > 15 and not text[0].isdigit():
                    content = text
                    break
            posts.append({
                "post_url": post_url,
                "content": content,
                "author": author,
                "author_name": display_name,
                "timestamp": None,
                "media_urls": [],
                "likes": None,
                "replies": None,
            })

    return {
        "username": author,
        "display_name": display_name,
        "bio": bio,
        "profile_picture": profile_picture,
        "posts": posts,
        "posts_count": len(posts),
    }


class BrowserScraper:
    def __init__(self, token: Optional[str], endpoint: str = "wss://chrome.browserless.io", timeout_ms: int = 20000):
        self.token = token
        self.endpoint = endpoint
        self.timeout_ms = timeout_ms

    async def render(
        self,
        url: str,
        wait_for_selector: Optional[str] = None,
        wait_ms: int = 3000,
        timeout_ms: Optional[int] = None,
        scroll: bool = False
    ) -> str:
        """Load url in a remote browser and return the hydrated page HTML"""
        if not self.token:
            raise ServiceNotConfiguredError("Scraping service is not configured")

        timeout_ms = timeout_ms or self.timeout_ms
        try:
            async with async_playwright() as p:
                browser = await p.chromium.connect(f"{self.endpoint}?token={self.token}")
                try:
                    context = await browser.new_context(
                        user_agent=BROWSER_USER_AGENT,
                        viewport=VIEWPORT,
                        locale=LOCALE,
                    )
                    page = await context.new_page()
                    page.set_default_timeout(timeout_ms)
                    await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

                    if wait_for_selector:
                        try:
                            await page.wait_for_selector(wait_for_selector, timeout=TWEET_TEXT_WAIT_MS)
                        except PlaywrightTimeout:
                            # media-only posts have no text node
                            logger.info("browser_selector_missing", url=url, selector=wait_for_selector)
                    else:
                        await page.wait_for_timeout(wait_ms)

                    if scroll:
                        # feeds load more entries once scrolled
                        await page.evaluate("window.scrollTo(0, document.body.scrollHeight / 2)")
                        await page.wait_for_timeout(SCROLL_WAIT_MS)

                    html = await page.content()
                    await context.close()
                    return html
                finally:
                    await browser.close()
        except PlaywrightTimeout:
            logger.warning("browser_render_timeout", url=url)
            raise ScrapeTimeoutError(f"Timed out loading {url}")
        except PlaywrightError as e:
            logger.error("browser_connection_failed", url=url, error=str(e))
            raise ExternalServiceError("Failed to connect to scraping service")

    async def scrape_tweet(self, url: str) -> Dict[str, Any]:
        if not is_twitter_status_url(url):
            raise ValidationError("Invalid Twitter/X URL format. Expected: https://x.com/user/status/123...")

        html = await self.render(url, wait_for_selector='[data-testid="tweetText"]')
        result = parse_tweet_html(html)
        logger.info("tweet_scraped", url=url, has_content=bool(result["content"]), media=len(result["media_urls"]))
        return result

    async def scrape_threads_post(self, url: str) -> Dict[str, Any]:
        if not url or 'threads.net' not in url:
            raise ValidationError("URL must be a Threads URL")

        html = await self.render(url, wait_ms=THREADS_HYDRATION_WAIT_MS, timeout_ms=THREADS_PAGE_TIMEOUT_MS)
        result = parse_threads_html(html, url)
        logger.info("threads_post_scraped", url=url, has_content=bool(result["content"]))
        return result

    async def scrape_threads_profile(self, url: str, limit: int = 10) -> Dict[str, Any]:
        match = THREADS_PROFILE_PATTERN.search(url or '')
        if not match:
            raise ValidationError("URL must be a Threads profile URL (e.g., https://threads.net/@username)")
        if not 1 <= limit <= THREADS_PROFILE_MAX_POSTS:
            raise ValidationError(f"limit must be between 1 and {THREADS_PROFILE_MAX_POSTS}")

        html = await self.render(
            url,
            wait_ms=THREADS_HYDRATION_WAIT_MS,
            timeout_ms=THREADS_PROFILE_TIMEOUT_MS,
            scroll=True
        )
        result = parse_threads_profile_html(html, match.group(1), limit)
        logger.info("threads_profile_scraped", username=result["username"], posts=result["posts_count"])
        return result
