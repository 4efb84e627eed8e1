# ===== IMPORTS & DEPENDENCIES =====
import html
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional, Union

from bs4 import BeautifulSoup

from steam_fetch.scraping.rules import ExtractionRule
from steam_fetch.utils.text_utils import collapse_whitespace, strip_tags, unique_ordered

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

ExtractedValue = Union[str, List[str], None]


# ===== CORE BUSINESS LOGIC =====
class Extractor(ABC):
    """
    One way of applying ExtractionRules to a page.
    Implementations must return the same values for the same HTML.
    """
    name = "base"

    @abstractmethod
    def parse(self, html_text: str) -> Any:
        """Builds the per-call document the rules run against."""

    @abstractmethod
    def _matches(self, document: Any, rule: ExtractionRule) -> Iterator[str]:
        """Yields every normalized match of the rule in document order."""

    def extract(self, document: Any, rule: ExtractionRule) -> ExtractedValue:
        """
        Single rules give the first non-empty match, multiple rules a
        de-duplicated list. No match gives None; this never raises.
        """
        try:
            if not rule.multiple:
                return next((value for value in self._matches(document, rule) if value), None)
            values = unique_ordered(value for value in self._matches(document, rule) if value)
            return values or None
        except Exception as e:
            logger.error(f"❌ [{self.__class__.__name__}] Rule for '{rule.field}' failed: {e}", exc_info=True)
            return None


class DomExtractor(Extractor):
    """Walks a parsed BeautifulSoup tree with the rules' CSS selectors."""
    name = "dom"

    def parse(self, html_text: str) -> BeautifulSoup:
        return BeautifulSoup(html_text, 'html.parser')

    def _matches(self, document: BeautifulSoup, rule: ExtractionRule) -> Iterator[str]:
        for element in document.select(rule.selector):
            if rule.attribute:
                value = element.get(rule.attribute)
                if isinstance(value, list):  # multi-valued attributes such as class
                    value = " ".join(value)
                yield collapse_whitespace(value or "")
            else:
                yield collapse_whitespace(element.get_text())


class RegexExtractor(Extractor):
    """Runs the rules' regular expressions over the raw markup; needs no parser."""
    name = "regex"

    def parse(self, html_text: str) -> str:
        return html_text

    def _matches(self, document: str, rule: ExtractionRule) -> Iterator[str]:
        for match in rule.pattern.finditer(document):
            if rule.attribute:
                yield collapse_whitespace(html.unescape(match.group(1)))
            else:
                yield strip_tags(inner_markup(document, match.end(), rule.tag))


def inner_markup(document: str, start: int, tag: str) -> str:
    """
    Markup from `start` (just past an opening <tag>) up to the close tag
    that balances it, so nested elements of the same name stay inside.
    An element that is never closed runs to the end of the document.
    """
    depth = 1
    for match in re.finditer(rf'<(/?){re.escape(tag)}\b[^>]*>', document[start:], re.IGNORECASE):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return document[start:start + match.start()]
        elif not match.group(0).endswith("/>"):
            depth += 1
    return document[start:]


def select_extractor(supports_dom: bool) -> Extractor:
    """Picks the strategy once, from a capability flag supplied by the caller."""
    return DomExtractor() if supports_dom else RegexExtractor()


def extractor_for(strategy: Optional[str]) -> Extractor:
    """Maps the configured strategy name ('dom' or 'regex') to an extractor."""
    return select_extractor(supports_dom=(strategy or "dom").lower() != "regex")
