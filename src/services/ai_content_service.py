"""
AI content service
Summaries, platform posts, style analysis, rewrites, translations and headlines
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from ..api.v1.constants import PlatformLimit, PLATFORM_STYLE_HINTS
from ..exceptions import ValidationError
from ..models.enums import NewsCategory, Platform
from ..utils.prompt_strings import PromptStrings
from .llm_service import LLMService

logger = structlog.get_logger(__name__)

MIN_SUMMARY_CONTENT_LENGTH = 50
SUMMARY_CONTENT_LIMIT = 3000
MIN_TRANSLATE_CONTENT_LENGTH = 20
TRANSLATE_CONTENT_LIMIT = 12000
HEADLINE_CONTENT_LIMIT = 2000

VALID_CATEGORIES = {c.value for c in NewsCategory}
DEFAULT_INSIGHT = "Please check the original article for details."


def default_bullets(title: str) -> List[str]:
    return [
        f"{title} - see the original article for details.",
        "More information is needed.",
        "The full story is available at the original link.",
    ]


class AIContentService:
    def __init__(self, llm_service: LLMService, language: str = "Korean"):
        self.llm = llm_service
        self.language = language

    async def summarize(self, title: str, content: Optional[str]) -> Dict[str, Any]:
        if not title:
            raise ValidationError("Title is required for summarize mode")

        trimmed = (content or "").strip()
        if len(trimmed) < MIN_SUMMARY_CONTENT_LENGTH:
            # Too little text to summarize; point the reader at the original
            return {
                "headline": title,
                "bullets": default_bullets(title),
                "insight": DEFAULT_INSIGHT,
                "category": NewsCategory.OTHER.value,
                "wow_factor": None,
            }

        result = await self.llm.generate_json(
            PromptStrings.SUMMARIZE_SYSTEM.format(language=self.language),
            PromptStrings.SUMMARIZE_USER.format(title=title, content=trimmed[:SUMMARY_CONTENT_LIMIT]),
            temperature=0.6,
        )

        bullets = [str(b) for b in result.get("bullets") or [] if b][:3]
        # Always three bullets; short answers are padded with the generic ones
        bullets += default_bullets(title)[len(bullets):]

        category = result.get("category")
        if category not in VALID_CATEGORIES:
            category = NewsCategory.OTHER.value

        wow = result.get("wowFactor") or result.get("wow_factor")
        wow_factor = None
        if isinstance(wow, dict) and wow.get("description"):
            wow_factor = {
                "description": wow.get("description", ""),
                "suggested_media": wow.get("suggestedMedia") or wow.get("suggested_media") or "",
            }

        logger.info("summary_generated", category=category, bullets=len(bullets))
        return {
            "headline": result.get("headline") or title,
            "bullets": bullets,
            "insight": result.get("insight") or DEFAULT_INSIGHT,
            "category": category,
            "wow_factor": wow_factor,
        }

    async def quick_summary(self, title: str, content: Optional[str]) -> Dict[str, Any]:
        """Summary shape stored on a news item"""
        summary = await self.summarize(title, content)
        return {
            "bullets": summary["bullets"],
            "category": summary["category"],
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

    async def generate_post(
        self,
        title: str,
        content: str,
        platform: str,
        style_template: Optional[Dict[str, Any]] = None,
        url: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not title or not content or not platform:
            raise ValidationError("Title, content, and platform are required for generate mode")
        if platform not in PLATFORM_STYLE_HINTS:
            raise ValidationError("Invalid platform")

        max_length = PlatformLimit.for_platform(platform)
        is_instagram = platform == Platform.INSTAGRAM.value

        system_prompt = PromptStrings.GENERATE_SYSTEM.format(
            platform_hint=PLATFORM_STYLE_HINTS[platform],
            language=self.language,
            style=self._style_prompt(style_template),
        )
        user_prompt = PromptStrings.GENERATE_USER.format(
            platform=platform,
            title=title,
            content=content,
            link_line=f"Original link: {url}" if url else "",
            max_length=max_length,
            hashtags_field=',\n  "hashtags": ["hashtag", "list"]' if is_instagram else "",
        )

        result = await self.llm.generate_json(system_prompt, user_prompt, temperature=0.7)

        text = (result.get("content") or "").strip()
        if not text:
            text = f"{title}\n\nSee the original article for details."
        text = text[:max_length]

        hashtags = None
        if is_instagram:
            hashtags = [str(tag).lstrip("#") for tag in result.get("hashtags") or []]

        logger.info("post_generated", platform=platform, char_count=len(text))
        return {"content": text, "char_count": len(text), "hashtags": hashtags}

    async def analyze_style(self, examples: List[str]) -> Dict[str, Any]:
        examples = [e.strip() for e in examples or [] if e and e.strip()]
        if not examples:
            raise ValidationError("Examples are required for analyze-style mode")

        numbered = "\n\n".join(f"{i}. {example}" for i, example in enumerate(examples, 1))
        result = await self.llm.generate_json(
            PromptStrings.ANALYZE_STYLE_SYSTEM,
            PromptStrings.ANALYZE_STYLE_USER.format(examples=numbered),
            temperature=0.5,
        )

        characteristics = result.get("characteristics")
        if not isinstance(characteristics, list):
            characteristics = []
        return {
            "tone": result.get("tone") or "",
            "characteristics": [str(c) for c in characteristics],
        }

    async def regenerate_post(
        self,
        previous_content: str,
        feedback: str,
        platform: str,
        style_template: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not previous_content or not feedback or not platform:
            raise ValidationError("previousContent, feedback, and platform are required for regenerate mode")

        max_length = PlatformLimit.for_platform(platform)
        result = await self.llm.generate_json(
            PromptStrings.REGENERATE_SYSTEM.format(
                max_length=max_length,
                language=self.language,
                style=self._style_prompt(style_template),
            ),
            PromptStrings.REGENERATE_USER.format(previous_content=previous_content, feedback=feedback),
            temperature=0.7,
        )

        text = (result.get("content") or "").strip() or previous_content
        text = text[:max_length]
        return {"content": text, "char_count": len(text), "hashtags": None}

    async def translate(self, title: Optional[str], content: str) -> Dict[str, Any]:
        if not content:
            raise ValidationError("Content is required for translate mode")

        title = title or ""
        if len(content.strip()) < MIN_TRANSLATE_CONTENT_LENGTH:
            return {"title": title, "content": content, "is_translated": False}

        result = await self.llm.generate_json(
            PromptStrings.TRANSLATE_SYSTEM.format(language=self.language),
            PromptStrings.TRANSLATE_USER.format(title=title, content=content[:TRANSLATE_CONTENT_LIMIT]),
            temperature=0.2,
            max_tokens=8192,
        )

        translated = result.get("content")
        if not translated:
            logger.warning("translation_empty", content_length=len(content))
            return {"title": title, "content": content, "is_translated": False}

        return {
            "title": result.get("title") or title,
            "content": translated,
            "is_translated": True,
        }

    async def generate_headline(self, title: str, content: Optional[str] = None) -> Dict[str, Any]:
        if not title:
            raise ValidationError("Title is required")

        result = await self.llm.generate_json(
            PromptStrings.HEADLINE_SYSTEM.format(language=self.language),
            PromptStrings.HEADLINE_USER.format(title=title, content=(content or "")[:HEADLINE_CONTENT_LIMIT]),
            temperature=0.8,
        )

        alternatives = [str(a) for a in result.get("alternatives") or [] if a][:3]
        return {"main": result.get("main") or title, "alternatives": alternatives}

    @staticmethod
    def _style_prompt(style_template: Optional[Dict[str, Any]]) -> str:
        if not style_template:
            return ""

        parts = []
        if style_template.get("tone"):
            parts.append(f"\n\nTone: {style_template['tone']}")
        if style_template.get("characteristics"):
            parts.append(f"\nStyle characteristics: {', '.join(style_template['characteristics'])}")
        if style_template.get("examples"):
            examples = "\n".join(f"{i}. {e}" for i, e in enumerate(style_template["examples"], 1))
            parts.append(f"\n\nExample posts to imitate:\n{examples}")
        return "".join(parts)
