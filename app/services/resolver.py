from dataclasses import dataclass
from typing import Optional, Sequence

from bs4 import BeautifulSoup

from app.fetch.html_analyzer import attribute_text, select_first
from app.schemas import LinkMetadata

# Marks a rule that reads the element's text content instead of an attribute
TEXT = None

@dataclass(frozen=True)
class ExtractionRule:
    """One step of a fallback chain: which element to select and what to read from it"""

    tag: str
    attribute: Optional[str] = None
    value: Optional[str] = None
    source: Optional[str] = TEXT
    contains: bool = False

    def apply(self, tree: BeautifulSoup) -> str:
        element = select_first(tree, self.tag, self.attribute, self.value, self.contains)
        if element is None:
            return ""
        if self.source is TEXT:
            return element.get_text().strip()
        return attribute_text(element, self.source).strip()

# Standard tag first, then OpenGraph, then the looser alternative.
TITLE_RULES = (
    ExtractionRule("title"),
    ExtractionRule("meta", "property", "og:title", "content"),
    ExtractionRule("meta", "property", "og:site_name", "content"),
)

IMAGE_RULES = (
    ExtractionRule("meta", "property", "og:image", "content"),
    ExtractionRule("link", "rel", "icon", "href", contains=True),
    ExtractionRule("link", "rel", "apple-touch-icon", "href", contains=True),
)

DESCRIPTION_RULES = (
    ExtractionRule("meta", "name", "description", "content"),
    ExtractionRule("meta", "property", "og:description", "content"),
)


def first_match(tree: BeautifulSoup, rules: Sequence[ExtractionRule]) -> str:
    """Value of the first rule that yields a non-empty string, or empty string"""
    for rule in rules:
        value = rule.apply(tree)
        if value:
            return value
    return ""


def resolve(tree: BeautifulSoup) -> LinkMetadata:
    """Run the title, image and description chains independently"""
    return LinkMetadata(
        title=first_match(tree, TITLE_RULES),
        image=first_match(tree, IMAGE_RULES),
        description=first_match(tree, DESCRIPTION_RULES),
    )
