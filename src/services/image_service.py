import asyncio
import base64
import binascii
import hashlib
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

import structlog
from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from ..api.v1.constants import PLATFORM_IMAGE_SIZES, DEFAULT_IMAGE_SIZE
from ..exceptions import LLMServiceError, ValidationError
from ..utils.prompt_strings import PromptStrings
from ..utils.string_utils import char_display_width
from .llm_service import LLMService

logger = structlog.get_logger(__name__)

MAX_HEADLINE_LINES = 3
OVERLAY_PADDING = 40
LINE_HEIGHT_RATIO = 1.4
CHAR_WIDTH_RATIO = 0.6
BAND_MAX_ALPHA = 153  # 0.6 opacity

GRADIENT_PALETTES = [
    ((24, 32, 72), (88, 28, 135)),
    ((15, 23, 42), (30, 64, 175)),
    ((17, 94, 89), (15, 23, 42)),
    ((67, 20, 7), (190, 18, 60)),
    ((30, 27, 75), (14, 116, 144)),
]


def get_platform_image_size(platform: str, aspect_ratio: str) -> Tuple[int, int]:
    for ratio, _label, width, height in PLATFORM_IMAGE_SIZES.get(platform, []):
        if ratio == aspect_ratio:
            return width, height
    return DEFAULT_IMAGE_SIZE


def get_platform_sizes(platform: str) -> List[Dict[str, Any]]:
    return [
        {"aspect_ratio": ratio, "label": label, "width": width, "height": height}
        for ratio, label, width, height in PLATFORM_IMAGE_SIZES.get(platform, [])
    ]


def wrap_headline(text: str, max_chars: int, max_lines: int = MAX_HEADLINE_LINES) -> List[str]:
    """Break text into lines of at most max_chars columns; wide characters take two."""
    lines = []
    current = ""
    width = 0
    for char in text.strip():
        current += char
        width += char_display_width(char)
        if width >= max_chars:
            lines.append(current.strip())
            current = ""
            width = 0
    if current.strip():
        lines.append(current.strip())
    return lines[:max_lines]


def choose_image_generation_size(width: int, height: int) -> str:
    if width > height:
        return "1536x1024"
    if height > width:
        return "1024x1536"
    return "1024x1024"


class ImageService:
    def __init__(self, llm_service: Optional[LLMService] = None, font_path: Optional[str] = None):
        self.llm = llm_service
        self.font_path = font_path

    async def generate_news_image(
        self,
        headline: str,
        summary: Optional[str],
        platform: str,
        aspect_ratio: str
    ) -> Dict[str, Any]:
        if platform not in PLATFORM_IMAGE_SIZES:
            raise ValidationError("Invalid platform")

        width, height = get_platform_image_size(platform, aspect_ratio)
        # Image model call and Pillow rendering both block
        png = await asyncio.to_thread(self.render_news_image, headline, summary or headline, width, height)
        logger.info("news_image_rendered", platform=platform, aspect_ratio=aspect_ratio, width=width, height=height)
        return {
            "base64": base64.b64encode(png).decode("ascii"),
            "mime_type": "image/png",
            "width": width,
            "height": height,
        }

    def render_news_image(self, headline: str, summary: str, width: int, height: int) -> bytes:
        background = self._ai_background(headline, summary, width, height)
        if background is None:
            background = self.gradient_background(headline, width, height)
        return self.add_headline_overlay(background, headline, width, height)

    def _ai_background(self, headline: str, summary: str, width: int, height: int) -> Optional[Image.Image]:
        if not self.llm or not self.llm.supports_image_generation():
            return None

        prompt = PromptStrings.IMAGE_BACKGROUND.format(headline=headline, summary=summary[:500])
        try:
            b64 = self.llm.generate_image(prompt, size=choose_image_generation_size(width, height))
        except LLMServiceError as e:
            logger.warning("ai_background_failed_using_gradient", error=str(e))
            return None

        try:
            image = Image.open(BytesIO(base64.b64decode(b64, validate=True)))
            image.load()
        except (UnidentifiedImageError, binascii.Error, OSError) as e:
            logger.warning("ai_background_unreadable_using_gradient", error=str(e))
            return None
        return image

    @staticmethod
    def gradient_background(seed: str, width: int, height: int) -> Image.Image:
        digest = hashlib.md5(seed.encode("utf-8")).digest()
        top, bottom = GRADIENT_PALETTES[digest[0] % len(GRADIENT_PALETTES)]

        image = Image.new("RGB", (width, height), top)
        draw = ImageDraw.Draw(image)
        for y in range(height):
            t = y / max(height - 1, 1)
            color = tuple(int(top[i] + (bottom[i] - top[i]) * t) for i in range(3))
            draw.line([(0, y), (width, y)], fill=color)
        return image

    def add_headline_overlay(
        self,
        background: Image.Image,
        headline: str,
        width: int,
        height: int,
        position: str = "top",
        font_size: Optional[int] = None,
        padding: int = OVERLAY_PADDING
    ) -> bytes:
        """
        Fit the background to width x height (cover) and draw the headline
        on a fading dark band. Returns PNG bytes.
        """
        font_size = font_size or width // 20
        canvas = ImageOps.fit(background.convert("RGB"), (width, height), method=Image.LANCZOS).convert("RGBA")

        max_chars = max(1, int((width - padding * 2) / (font_size * CHAR_WIDTH_RATIO)))
        lines = wrap_headline(headline, max_chars)
        line_height = int(font_size * LINE_HEIGHT_RATIO)
        block_height = len(lines) * line_height + padding * 2

        if position == "center":
            band_top = (height - block_height) // 2
        elif position == "bottom":
            band_top = height - block_height
        else:
            band_top = 0

        overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)

        band_height = block_height + 40
        for offset in range(band_height):
            y = band_top + offset
            if 0 <= y < height:
                alpha = int(BAND_MAX_ALPHA * (1 - offset / band_height))
                draw.line([(0, y), (width, y)], fill=(0, 0, 0, alpha))

        font = self._load_font(font_size)
        for index, line in enumerate(lines):
            y = band_top + padding + index * line_height
            draw.text((padding + 2, y + 2), line, font=font, fill=(0, 0, 0, 128))
            draw.text((padding, y), line, font=font, fill=(255, 255, 255, 255))

        result = Image.alpha_composite(canvas, overlay)
        buffer = BytesIO()
        result.save(buffer, format="PNG")
        return buffer.getvalue()

    def _load_font(self, size: int):
        if self.font_path:
            try:
                return ImageFont.truetype(self.font_path, size)
            except OSError as e:
                logger.warning("overlay_font_unavailable", font_path=self.font_path, error=str(e))
        return ImageFont.load_default(size=size)
