# ===== IMPORTS & DEPENDENCIES =====
import html
import json
import re
from typing import Any, Callable, Iterable, List, Optional

from bs4 import BeautifulSoup

# ===== CONFIGURATION & CONSTANTS =====
_TAG_RE = re.compile(r'<[^>]+>')

# ===== UTILITY FUNCTIONS =====

def collapse_whitespace(text: str) -> str:
    """Collapses every whitespace run (including &nbsp;) into one space and trims."""
    return " ".join(text.split())


def strip_tags(fragment: str) -> str:
    """
    Turns a raw HTML fragment into plain text without a parser: tags are
    dropped, entities decoded, whitespace collapsed. Produces the same text
    BeautifulSoup's get_text() would for simple markup.
    """
    if not fragment:
        return ""
    return collapse_whitespace(html.unescape(_TAG_RE.sub('', fragment)))


def sanitize_html(html_text: str) -> str:
    """
    Removes all HTML tags from a string, returning only the clean text.
    Block-level breaks become single spaces.
    """
    if not html_text:
        return ""
    soup = BeautifulSoup(html_text, "lxml")
    return collapse_whitespace(soup.get_text(separator=' ', strip=True))


def digits_only(text: Optional[str]) -> str:
    """'-57%' -> '57', 'Includes 78 Steam Achievements' -> '78'."""
    if not text:
        return ""
    match = re.search(r'\d[\d,.]*', text)
    return re.sub(r'\D', '', match.group(0)) if match else ""


def unique_ordered(items: Iterable[Any], key: Optional[Callable[[Any], Any]] = None) -> List[Any]:
    """
    De-duplicates while keeping the first occurrence of each item.
    Unhashable items (dicts from upstream JSON) are keyed by canonical JSON.
    """
    seen = set()
    result = []
    for item in items:
        if key is not None:
            marker = key(item)
        elif isinstance(item, (dict, list)):
            marker = json.dumps(item, sort_keys=True, ensure_ascii=False)
        else:
            marker = item
        if marker in seen:
            continue
        seen.add(marker)
        result.append(item)
    return result
