"""
HTML head utilities for link metadata extraction.

Only the document head is parsed: it bounds parser work and keeps body
content from being mistaken for head metadata.
"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

_HEAD_END = re.compile(r"</head\s*>", re.IGNORECASE)


def truncate_to_head(body: str) -> str:
    """
    Return everything before the first closing head tag.
    Bodies without one are returned unchanged.
    """
    if not body:
        return ""
    match = _HEAD_END.search(body)
    if match:
        return body[:match.start()]
    return body


def parse_head(fragment: str) -> BeautifulSoup:
    """
    Build a queryable tree from a (possibly malformed) head fragment.

    html.parser repairs unbalanced and unknown tags on its own. If it still
    rejects the markup, an empty tree is returned so that resolution yields
    empty fields instead of failing the request.
    """
    try:
        return BeautifulSoup(fragment, "html.parser")
    except Exception as e:
        logger.warning("Markup rejected by parser, continuing with empty tree: %s", e)
        return BeautifulSoup("", "html.parser")


def attribute_text(element: Tag, name: str) -> str:
    """Attribute value as a string; multi-valued attributes like rel are space-joined"""
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def select_first(
    tree: BeautifulSoup,
    tag: str,
    attribute: Optional[str] = None,
    value: Optional[str] = None,
    contains: bool = False,
) -> Optional[Tag]:
    """
    First element in document order named `tag` whose `attribute` equals
    `value` (or contains it as a substring when `contains` is set).
    """
    for element in tree.find_all(tag):
        if attribute is None:
            return element
        actual = attribute_text(element, attribute)
        if contains and value in actual:
            return element
        if not contains and actual == value:
            return element
    return None
