import html
import re
import unicodedata

from bs4 import BeautifulSoup


def clean_text(text: str) -> str:
    return ' '.join(text.split())


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def strip_html(value: str) -> str:
    """Plain text from an HTML fragment: images and tags dropped, entities unescaped."""
    if not value:
        return ""
    soup = BeautifulSoup(value, "html.parser")
    for img in soup.find_all("img"):
        img.decompose()
    text = html.unescape(soup.get_text(" "))
    return clean_text(text)


def char_display_width(char: str) -> int:
    # Hangul, CJK and full-width forms take two columns
    return 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1


def parse_compact_number(text: str):
    """'1.2K' -> 1200, '3M' -> 3000000, '1,024' -> 1024. None when unparseable."""
    if not text:
        return None
    cleaned = text.strip().lower().replace(",", "")
    match = re.match(r'^([\d.]+)\s*([km]?)', cleaned)
    if not match:
        return None
    try:
        number = float(match.group(1))
    except ValueError:
        return None
    multiplier = {"k": 1000, "m": 1000000}.get(match.group(2), 1)
    return int(round(number * multiplier))
