"""Element search criteria, matching and screen summaries."""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from . import config
from .ui_parser import UIElement

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class FindCriteria:
    """Filter over UIElements; None means "no constraint".

    `normalize_whitespace` and `case_insensitive` apply to every string
    comparison. Identifier fields (class, resource id) ignore
    `normalize_whitespace`.
    """

    text: Optional[str] = None
    text_contains: Optional[str] = None
    class_name: Optional[str] = None
    resource_id: Optional[str] = None
    resource_id_contains: Optional[str] = None
    content_desc: Optional[str] = None
    content_desc_contains: Optional[str] = None
    checkable: Optional[bool] = None
    clickable: Optional[bool] = None
    normalize_whitespace: bool = False
    case_insensitive: bool = False

    def normalize_text(self, value: str) -> str:
        if self.normalize_whitespace:
            value = _WHITESPACE_RE.sub(" ", value).strip()
        if self.case_insensitive:
            value = value.casefold()
        return value

    def normalize_identifier(self, value: str) -> str:
        return value.casefold() if self.case_insensitive else value


def _text_matches(value: str, exact: Optional[str], contains: Optional[str], criteria: FindCriteria) -> bool:
    normalized = criteria.normalize_text(value)
    if exact is not None and normalized != criteria.normalize_text(exact):
        return False
    if contains is not None and criteria.normalize_text(contains) not in normalized:
        return False
    return True


def element_matches(element: UIElement, criteria: FindCriteria) -> bool:
    """Check one element against every specified criterion."""
    if not _text_matches(element.text, criteria.text, criteria.text_contains, criteria):
        return False
    if not _text_matches(
        element.content_desc,
        criteria.content_desc,
        criteria.content_desc_contains,
        criteria,
    ):
        return False

    ident = criteria.normalize_identifier
    if criteria.class_name is not None and ident(element.class_name) != ident(criteria.class_name):
        return False
    if criteria.resource_id is not None and ident(element.resource_id) != ident(criteria.resource_id):
        return False
    if criteria.resource_id_contains is not None and ident(
        criteria.resource_id_contains
    ) not in ident(element.resource_id):
        return False

    if criteria.checkable is not None and element.checkable != criteria.checkable:
        return False
    if criteria.clickable is not None and element.clickable != criteria.clickable:
        return False
    return True


def find_elements(elements: Iterable[UIElement], criteria: FindCriteria) -> List[UIElement]:
    """Return the elements matching all criteria, in their original order."""
    return [element for element in elements if element_matches(element, criteria)]


def matches_state(
    element: UIElement,
    checked: Optional[bool] = None,
    enabled: Optional[bool] = None,
    clickable: Optional[bool] = None,
) -> bool:
    """State predicate used by waits and assertions."""
    if checked is not None and element.checked != checked:
        return False
    if enabled is not None and element.enabled != enabled:
        return False
    if clickable is not None and element.clickable != clickable:
        return False
    return True


def is_interactive(element: UIElement) -> bool:
    return element.clickable or element.checkable or element.scrollable


def element_label(element: UIElement) -> str:
    return (
        element.text
        or element.content_desc
        or element.resource_id
        or element.class_name
        or f"#{element.index}"
    )


def _element_flags(element: UIElement) -> List[str]:
    flags = []
    if element.clickable:
        flags.append("clickable")
    if element.checkable:
        flags.append("checkable")
    if element.scrollable:
        flags.append("scrollable")
    return flags


def generate_summary(elements: List[UIElement], max_items: int = config.SUMMARY_MAX_ITEMS) -> str:
    """One-line digest: element count plus the first interactive elements.

    >>> generate_summary([])
    'No UI elements found.'
    """
    if not elements:
        return "No UI elements found."

    interactive = [element for element in elements if is_interactive(element)]
    base = f"Found {len(elements)} elements ({len(interactive)} interactive)."
    if not interactive:
        return base

    items = []
    for number, element in enumerate(interactive[:max_items], start=1):
        flags = _element_flags(element)
        suffix = f" ({', '.join(flags)})" if flags else ""
        items.append(f"{number}. {element_label(element)}{suffix}")

    return f"{base} Interactive: {' | '.join(items)}"
