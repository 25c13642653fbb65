from enum import Enum


class AIMode(str, Enum):
    SUMMARIZE = "summarize"
    GENERATE = "generate"
    ANALYZE_STYLE = "analyze-style"
    REGENERATE = "regenerate"
    TRANSLATE = "translate"


class ImageMode(str, Enum):
    GENERATE = "generate"
    SIZES = "sizes"


class PlatformLimit:
    """Maximum post length per platform, in characters"""
    TWITTER = 280
    THREADS = 500
    INSTAGRAM = 2200
    LINKEDIN = 3000
    BLUESKY = 300
    DEFAULT = 500

    @classmethod
    def for_platform(cls, platform: str) -> int:
        limit = getattr(cls, (platform or "").upper(), None)
        return limit if isinstance(limit, int) else cls.DEFAULT


PLATFORM_STYLE_HINTS = {
    "twitter": "X (Twitter): short and punchy, 1-2 hashtags",
    "threads": "Threads: casual but informative",
    "instagram": "Instagram: use emoji, 5-10 hashtags",
    "linkedin": "LinkedIn: professional and insightful",
    "bluesky": "Bluesky: conversational, at most 1-2 hashtags",
}

# (aspect ratio, label, width, height)
PLATFORM_IMAGE_SIZES = {
    "twitter": [
        ("16:9", "Landscape (16:9)", 1200, 675),
        ("1:1", "Square (1:1)", 1080, 1080),
        ("4:5", "Portrait (4:5)", 1080, 1350),
    ],
    "threads": [
        ("4:5", "Portrait (4:5)", 1080, 1350),
        ("1:1", "Square (1:1)", 1080, 1080),
        ("9:16", "Story (9:16)", 1080, 1920),
    ],
    "instagram": [
        ("4:5", "Feed portrait (4:5)", 1080, 1350),
        ("1:1", "Feed square (1:1)", 1080, 1080),
        ("9:16", "Story / Reels (9:16)", 1080, 1920),
    ],
    "linkedin": [
        ("1.91:1", "Feed landscape (1.91:1)", 1200, 627),
        ("1:1", "Feed square (1:1)", 1200, 1200),
        ("16:9", "Article cover (16:9)", 1920, 1080),
    ],
    "bluesky": [
        ("16:9", "Landscape (16:9)", 1200, 675),
        ("1:1", "Square (1:1)", 1080, 1080),
    ],
}

DEFAULT_IMAGE_SIZE = (1200, 675)
DEFAULT_IMAGE_ASPECT_RATIO = "9:16"

FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, you will receive a password reset link."
