from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from ...models.enums import NewsCategory, Platform, Priority, SourceType, Theme
from ...utils.url_utils import is_valid_url
from .constants import AIMode, ImageMode, DEFAULT_IMAGE_ASPECT_RATIO


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_url(value):
        raise ValueError("Must be a valid URL")
    return value


def _not_null(value):
    if value is None:
        raise ValueError("Field cannot be null")
    return value


class RequestModel(BaseModel):
    """Request body whose enum fields are kept as their plain string values"""

    class Config:
        use_enum_values = True


# =============================================================================
# AUTH / USERS
# =============================================================================

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")
    display_name: Optional[str] = Field(None, max_length=100)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class SignupUser(BaseModel):
    user_id: str
    email: str
    display_name: str


class SignupResponse(BaseModel):
    success: bool = True
    user: SignupUser


class ForgotPasswordResponse(BaseModel):
    success: bool = True
    message: str


class VerifyTokenResponse(BaseModel):
    valid: bool
    firebase_uid: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class UserResponse(BaseModel):
    user_id: str
    email: str
    display_name: str
    photo_url: Optional[str] = None
    theme: Theme
    auto_summarize: bool
    last_read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserSettingsResponse(BaseModel):
    display_name: str
    photo_url: Optional[str] = None
    theme: Theme
    auto_summarize: bool

    class Config:
        from_attributes = True


class UserSettingsUpdate(RequestModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    photo_url: Optional[str] = None
    theme: Optional[Theme] = None
    auto_summarize: Optional[bool] = None

    validate_required = field_validator("display_name", "theme", "auto_summarize")(_not_null)


class LastReadResponse(BaseModel):
    last_read_at: Optional[datetime] = None


# =============================================================================
# SOURCES
# =============================================================================

class ScrapeConfig(BaseModel):
    article_selector: str = Field(..., min_length=1)
    title_selector: str = Field(..., min_length=1)
    link_selector: str = Field(..., min_length=1)
    description_selector: Optional[str] = None
    date_selector: Optional[str] = None


class SourceCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = None
    rss_url: Optional[str] = None
    website_url: str
    is_active: bool = True
    priority: Priority = Priority.MEDIUM
    type: SourceType = SourceType.RSS
    scrape_config: Optional[ScrapeConfig] = None

    validate_urls = field_validator("website_url", "rss_url")(_check_url)


class SourceUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = None
    rss_url: Optional[str] = None
    website_url: Optional[str] = None
    is_active: Optional[bool] = None
    priority: Optional[Priority] = None
    type: Optional[SourceType] = None
    scrape_config: Optional[ScrapeConfig] = None

    validate_urls = field_validator("website_url", "rss_url")(_check_url)
    validate_required = field_validator("name", "website_url", "is_active", "priority", "type")(_not_null)


class SourceResponse(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    rss_url: Optional[str] = None
    website_url: str
    is_active: bool
    last_fetched_at: Optional[datetime] = None
    priority: Priority
    type: SourceType
    scrape_config: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CollectResponse(BaseModel):
    source_id: str
    fetched: int
    created: int
    summarized: int


# =============================================================================
# NEWS ITEMS
# =============================================================================

class QuickSummary(RequestModel):
    bullets: List[str]
    category: NewsCategory
    created_at: Optional[datetime] = None


class NewsItemCreate(RequestModel):
    source_id: str
    title: str = Field(..., min_length=1)
    original_content: str = ""
    url: str
    published_at: Optional[datetime] = None
    is_processed: bool = False
    is_bookmarked: bool = False
    priority: Priority = Priority.MEDIUM
    media_urls: List[str] = Field(default_factory=list)
    quick_summary: Optional[QuickSummary] = None
    translated_content: Optional[str] = None

    validate_url = field_validator("url")(_check_url)


class NewsItemUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=1)
    is_processed: Optional[bool] = None
    is_bookmarked: Optional[bool] = None
    priority: Optional[Priority] = None
    quick_summary: Optional[QuickSummary] = None
    translated_content: Optional[str] = None
    translated_at: Optional[datetime] = None

    validate_required = field_validator("title", "is_processed", "is_bookmarked", "priority")(_not_null)


class NewsItemResponse(BaseModel):
    id: str
    user_id: str
    source_id: str
    title: str
    original_content: str
    url: str
    published_at: Optional[datetime] = None
    is_processed: bool
    is_bookmarked: bool
    priority: Priority
    media_urls: List[str] = Field(default_factory=list)
    quick_summary: Optional[Dict[str, Any]] = None
    translated_content: Optional[str] = None
    translated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator("media_urls", mode="before")
    @classmethod
    def default_media_urls(cls, value):
        return value or []


class SuccessResponse(BaseModel):
    success: bool = True


class PublishResultEntry(BaseModel):
    platform: str
    success: bool
    post_id: Optional[str] = None
    post_url: Optional[str] = None
    error: Optional[str] = None
    published_at: Optional[str] = None


class PublishHistoryResponse(BaseModel):
    id: str
    news_item_id: str
    content: str
    results: List[PublishResultEntry]
    created_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# STYLE TEMPLATES
# =============================================================================

class StyleTemplateCreate(RequestModel):
    platform: Platform
    name: str = Field(..., min_length=1, max_length=50)
    examples: List[str] = Field(default_factory=list)
    tone: Optional[str] = None
    characteristics: List[str] = Field(default_factory=list)
    is_default: bool = False


class StyleTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    examples: Optional[List[str]] = None
    tone: Optional[str] = None
    characteristics: Optional[List[str]] = None
    is_default: Optional[bool] = None

    validate_required = field_validator("name", "examples", "is_default")(_not_null)


class StyleTemplateResponse(BaseModel):
    id: str
    user_id: str
    platform: Platform
    name: str
    examples: List[str]
    tone: Optional[str] = None
    characteristics: List[str] = Field(default_factory=list)
    is_default: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator("characteristics", mode="before")
    @classmethod
    def default_characteristics(cls, value):
        return value or []


class StyleTemplateInput(BaseModel):
    """Inline template used to steer generate/regenerate"""
    tone: Optional[str] = None
    characteristics: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)


# =============================================================================
# SOCIAL CONNECTIONS / PUBLISHING
# =============================================================================

class SocialConnectionUpsert(RequestModel):
    platform: Platform
    handle: str = Field(..., min_length=1)
    is_connected: bool = True
    credentials: Optional[Dict[str, Any]] = None


class SocialConnectionResponse(BaseModel):
    id: str
    platform: Platform
    handle: str
    is_connected: bool
    connected_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BlueskyConnectRequest(BaseModel):
    identifier: str = Field(..., min_length=1)
    app_password: str = Field(..., min_length=1)


class OAuthCallbackRequest(BaseModel):
    code: Optional[str] = None
    state: Optional[str] = None


class AuthUrlResponse(BaseModel):
    auth_url: str
    state: str


class BlueskyPostRequest(BaseModel):
    text: str
    link_url: Optional[str] = None
    reply_to: Optional[Dict[str, str]] = None
    identifier: Optional[str] = None
    app_password: Optional[str] = None
    news_item_id: Optional[str] = None


class ThreadsPostRequest(BaseModel):
    text: str
    image_url: Optional[str] = None
    reply_to_id: Optional[str] = None
    access_token: Optional[str] = None
    user_id: Optional[str] = None
    news_item_id: Optional[str] = None


class LinkedInPostRequest(BaseModel):
    text: str
    article_url: Optional[str] = None
    article_title: Optional[str] = None
    article_description: Optional[str] = None
    visibility: str = "PUBLIC"
    access_token: Optional[str] = None
    person_urn: Optional[str] = None
    news_item_id: Optional[str] = None


class InstagramUserTag(BaseModel):
    username: str
    x: float = Field(..., ge=0, le=1)
    y: float = Field(..., ge=0, le=1)


class InstagramPostRequest(BaseModel):
    caption: str = ""
    image_url: Optional[str] = None
    location_id: Optional[str] = None
    user_tags: Optional[List[InstagramUserTag]] = None
    access_token: Optional[str] = None
    user_id: Optional[str] = None
    news_item_id: Optional[str] = None


class PostResultResponse(BaseModel):
    success: bool = True
    post: Dict[str, Any]


class PublishRequest(RequestModel):
    news_item_id: str
    content: str = Field(..., min_length=1)
    platforms: List[Platform] = Field(..., min_length=1)
    link_url: Optional[str] = None
    image_url: Optional[str] = None


# =============================================================================
# AI / HEADLINE
# =============================================================================

class AIRequest(RequestModel):
    mode: AIMode
    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    url: Optional[str] = None
    # Checked per mode: generate needs a known platform, regenerate falls back to a default limit
    platform: Optional[str] = None
    style_template: Optional[StyleTemplateInput] = None
    examples: Optional[List[str]] = None
    previous_content: Optional[str] = None
    feedback: Optional[str] = Field(None, min_length=1, max_length=500)


class HeadlineRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: Optional[str] = None


class HeadlineResponse(BaseModel):
    main: str
    alternatives: List[str]


# =============================================================================
# IMAGES
# =============================================================================

class ImageRequest(BaseModel):
    mode: ImageMode
    platform: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    aspect_ratio: str = DEFAULT_IMAGE_ASPECT_RATIO


class ImageSize(BaseModel):
    aspect_ratio: str
    label: str
    width: int
    height: int


class ImageSizesResponse(BaseModel):
    sizes: List[ImageSize]


class GeneratedImageResponse(BaseModel):
    base64: str
    mime_type: str
    width: int
    height: int
    aspect_ratio: str
    headline: str
    platform: str
    created_at: datetime


# =============================================================================
# COLLECTION (RSS / SCRAPE / YOUTUBE)
# =============================================================================

class UrlRequest(BaseModel):
    url: Optional[str] = None


class ThreadsProfileRequest(BaseModel):
    url: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=20)


class ScrapeSourceRequest(BaseModel):
    url: Optional[str] = None
    config: Optional[ScrapeConfig] = None


class SocialPreviewRequest(BaseModel):
    url: Optional[str] = None
    platform: Optional[str] = None


class YouTubeChannelRequest(BaseModel):
    url: Optional[str] = None
    limit: int = Field(10, ge=1, le=50)


class RSSItem(BaseModel):
    title: str
    link: str
    pub_date: Optional[str] = None
    iso_date: Optional[str] = None
    content: str
    content_snippet: str


class RSSFeedResponse(BaseModel):
    title: str
    description: str
    items: List[RSSItem]


class ScrapeResponse(BaseModel):
    title: str
    content: str
    url: str


class ScrapedArticle(BaseModel):
    title: str
    link: str
    description: Optional[str] = None
    pub_date: Optional[str] = None


class ScrapeSourceResponse(BaseModel):
    articles: List[ScrapedArticle]
    count: int
    url: str


class SocialPreviewResponse(BaseModel):
    platform: str
    type: str
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    thumbnail: Optional[str] = None
    url: str


class TweetResponse(BaseModel):
    author: str
    author_name: str
    content: str
    media_urls: List[str]
    timestamp: Optional[str] = None
    likes: int
    retweets: int


class ThreadsPostResponse(BaseModel):
    author: str
    author_name: str
    content: str
    media_urls: List[str]
    timestamp: Optional[str] = None
    likes: Optional[int] = None
    replies: Optional[int] = None
    url: str


class ThreadsProfilePost(BaseModel):
    post_url: str
    content: str
    author: str
    author_name: str
    timestamp: Optional[str] = None
    media_urls: List[str]
    likes: Optional[int] = None
    replies: Optional[int] = None


class ThreadsProfileResponse(BaseModel):
    username: str
    display_name: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    posts: List[ThreadsProfilePost]
    posts_count: int


class YouTubeVideoResponse(BaseModel):
    video_id: str
    title: str
    description: str
    thumbnail: str
    channel_name: str
    duration: str
    transcript: str


class YouTubeChannelVideo(BaseModel):
    video_id: str
    title: str
    link: str
    description: str
    published_at: Optional[str] = None
    thumbnail: str


class YouTubeChannelResponse(BaseModel):
    channel_id: str
    channel_title: str
    videos: List[YouTubeChannelVideo]
