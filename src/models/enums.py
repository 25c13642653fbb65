"""Enums shared by models and API schemas"""

from enum import Enum


class NewsCategory(str, Enum):
    """Category assigned by the quick summary"""
    PRODUCT = "product"
    UPDATE = "update"
    RESEARCH = "research"
    ANNOUNCEMENT = "announcement"
    OTHER = "other"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SourceType(str, Enum):
    """Where a source's items come from"""
    RSS = "rss"
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    THREADS = "threads"
    BLOG = "blog"         # Scraped listing page


class Platform(str, Enum):
    """Social platforms posts are generated for"""
    TWITTER = "twitter"
    THREADS = "threads"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    BLUESKY = "bluesky"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"
