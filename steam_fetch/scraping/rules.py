"""
Declarative extraction rules for Steam store pages.

Every rule names the GameRecord field it fills and carries two equivalent
ways of finding the value: a CSS selector for the DOM extractor and a regular
expression for the regex extractor. Attribute patterns capture the value;
text patterns match the opening `tag` only, and the extractor reads the
element up to its balancing close tag. Rules are applied in
declaration order and the first value written to a field wins, so a later
rule for the same field acts as a fallback.
"""
# ===== IMPORTS & DEPENDENCIES =====
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple


# ===== TYPES & INTERFACES =====
@dataclass(frozen=True)
class ExtractionRule:
    field: str
    selector: str
    pattern: Pattern[str]
    multiple: bool = False
    attribute: Optional[str] = None  # read this attribute instead of the element text
    tag: Optional[str] = None  # element opened by a text pattern


# ===== RULE BUILDERS =====
def _has_class(class_name: str) -> str:
    # lookahead so the class attribute may sit anywhere in the tag
    return rf'(?=[^>]*(?<![\w-])class="[^"]*(?<![\w-]){re.escape(class_name)}(?![\w-]))'


def _has_id(element_id: str) -> str:
    return rf'(?=[^>]*(?<![\w-])id="{re.escape(element_id)}")'


def _opening_tag_pattern(tag: str, condition: str) -> Pattern[str]:
    return re.compile(rf'<{tag}\b{condition}[^>]*>', re.DOTALL)


def _attribute_pattern(tag: str, condition: str, attribute: str) -> Pattern[str]:
    return re.compile(rf'<{tag}\b{condition}[^>]*?(?<![\w-]){re.escape(attribute)}="([^"]*)"', re.DOTALL)


def class_text(field: str, tag: str, class_name: str, multiple: bool = False) -> ExtractionRule:
    """Text of <tag class="... class_name ...">."""
    return ExtractionRule(
        field=field,
        selector=f"{tag}.{class_name}",
        pattern=_opening_tag_pattern(tag, _has_class(class_name)),
        multiple=multiple,
        tag=tag,
    )


def class_attribute(field: str, tag: str, class_name: str, attribute: str, multiple: bool = False) -> ExtractionRule:
    """An attribute value of <tag class="... class_name ...">."""
    return ExtractionRule(
        field=field,
        selector=f"{tag}.{class_name}",
        pattern=_attribute_pattern(tag, _has_class(class_name), attribute),
        multiple=multiple,
        attribute=attribute,
    )


def id_text(field: str, tag: str, element_id: str) -> ExtractionRule:
    """Text of <tag id="element_id">."""
    return ExtractionRule(
        field=field,
        selector=f"{tag}#{element_id}",
        pattern=_opening_tag_pattern(tag, _has_id(element_id)),
        tag=tag,
    )


def labelled_link(field: str, row_class: str, labels: Tuple[str, ...]) -> ExtractionRule:
    """
    First link inside the <div class="row_class"> whose text carries one of
    `labels` (e.g. 'Developer:' / '开发商:' rows of the store page).
    """
    alternatives = "|".join(re.escape(label) for label in labels)
    stay_in_row = rf'(?:(?!{re.escape(row_class)}).)*?'
    pattern = re.compile(
        rf'<div\b{_has_class(row_class)}[^>]*>{stay_in_row}(?:{alternatives}){stay_in_row}<a\b[^>]*>',
        re.DOTALL,
    )
    quoted = ", ".join(f'"{label}"' for label in labels)
    return ExtractionRule(
        field=field,
        selector=f"div.{row_class}:-soup-contains({quoted}) a",
        pattern=pattern,
        tag="a",
    )


def first_child_text(field: str, parent_id: str, child_class: str) -> ExtractionRule:
    """Text of the first child <div class="child_class"> of <div id="parent_id">."""
    return ExtractionRule(
        field=field,
        selector=f"div#{parent_id} > div.{child_class}:first-child",
        pattern=re.compile(
            rf'<div\b{_has_id(parent_id)}[^>]*>\s*<div\b{_has_class(child_class)}[^>]*>',
            re.DOTALL,
        ),
        tag="div",
    )


# ===== STORE PAGE RULES =====
STORE_PAGE_RULES: Tuple[ExtractionRule, ...] = (
    class_text("name", "div", "apphub_AppName"),
    class_text("short_description", "div", "game_description_snippet"),
    id_text("detailed_description", "div", "game_area_description"),

    # Price: the plain purchase price, else the discounted final price
    class_text("current_price", "div", "game_purchase_price"),
    class_text("current_price", "div", "discount_final_price"),
    class_text("original_price", "div", "discount_original_price"),
    class_text("discounted_price", "div", "discount_final_price"),
    class_text("discount_percentage", "div", "discount_pct"),

    class_text("release_date", "div", "date"),
    labelled_link("developer", "dev_row", ("Developer", "开发商")),
    labelled_link("publisher", "dev_row", ("Publisher", "发行商")),

    class_text("review_summary", "span", "game_review_summary"),
    class_text("review_description", "span", "responsive_reviewdesc"),

    class_attribute("header_image", "img", "game_header_image_full", "src"),
    class_attribute("screenshots", "a", "highlight_screenshot_link", "href", multiple=True),
    class_text("tags", "a", "app_tag", multiple=True),
    class_attribute("supported_platforms", "span", "platform_img", "class", multiple=True),
    class_text("supported_languages", "td", "ellipsis", multiple=True),

    # Requirement columns land in scratch fields, folded by the cleanup pass
    class_text("pc_requirements_minimum", "div", "game_area_sys_req_leftCol"),
    class_text("pc_requirements_minimum", "div", "game_area_sys_req_full"),
    class_text("pc_requirements_recommended", "div", "game_area_sys_req_rightCol"),

    class_text("achievement_count", "div", "achievement_count"),
    first_child_text("achievement_count", "achievement_block", "block_title"),
    class_text("dlc_list", "div", "game_area_dlc_name", multiple=True),
    id_text("legal_notice", "div", "game_area_legal"),
)

# Fields that only exist while a page is being scraped.
SCRATCH_FIELDS = ("pc_requirements_minimum", "pc_requirements_recommended")
