"""Parsing of uiautomator dumps into flat, typed element lists.

The dump grammar handled here is deliberately narrow: `<node ...>` tags with
`key="value"` attributes. No tree is built and nothing in the input can make
parsing fail; malformed attributes degrade to empty strings, `False` flags
or a zero rectangle.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

_ENTITY_RE = re.compile(r"&(#[xX][0-9a-fA-F]+|#[0-9]+|[A-Za-z][A-Za-z0-9]*);")
_NODE_RE = re.compile(r"<node\b[^>]*>")
_ATTR_RE = re.compile(r'([a-zA-Z0-9_:-]+)="([^"]*)"')
_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

NAMED_ENTITIES = {
    "quot": '"',
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "apos": "'",
}


def _decode_entity(match: "re.Match[str]") -> str:
    entity = match.group(1)
    if entity[0] != "#":
        return NAMED_ENTITIES.get(entity, "")
    try:
        if entity[1] in "xX":
            code = int(entity[2:], 16)
        else:
            code = int(entity[1:])
        return chr(code)
    except (ValueError, OverflowError):
        return ""


def decode_xml_entities(value: str) -> str:
    """Replace XML character entities with the characters they name.

    Unknown named entities and numeric references outside the Unicode range
    are dropped.
    """
    return _ENTITY_RE.sub(_decode_entity, value)


@dataclass(frozen=True)
class Center:
    x: int
    y: int

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle in screen pixels, top-left origin."""

    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def zero(cls) -> "Bounds":
        return cls(0, 0, 0, 0)

    @property
    def is_valid(self) -> bool:
        """True when the rectangle has positive width and height."""
        return self.x2 > self.x1 and self.y2 > self.y1

    @property
    def center(self) -> Center:
        # Midpoint rounded half up, so (0 + 1) / 2 gives 1
        return Center((self.x1 + self.x2 + 1) // 2, (self.y1 + self.y2 + 1) // 2)

    def to_dict(self) -> Dict[str, int]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}


@dataclass(frozen=True)
class UIElement:
    """One on-screen widget node from a dump."""

    index: int
    text: str
    class_name: str
    resource_id: str
    content_desc: str
    bounds: Bounds
    checkable: bool = False
    checked: bool = False
    clickable: bool = False
    enabled: bool = False
    focused: bool = False
    scrollable: bool = False
    selected: bool = False

    @property
    def center(self) -> Center:
        return self.bounds.center

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "text": self.text,
            "class": self.class_name,
            "resource_id": self.resource_id,
            "content_desc": self.content_desc,
            "bounds": self.bounds.to_dict(),
            "center": self.center.to_dict(),
            "checkable": self.checkable,
            "checked": self.checked,
            "clickable": self.clickable,
            "enabled": self.enabled,
            "focused": self.focused,
            "scrollable": self.scrollable,
            "selected": self.selected,
        }


def parse_attributes(tag: str) -> Dict[str, str]:
    """Extract decoded `key="value"` pairs from a single tag."""
    return {key: decode_xml_entities(value) for key, value in _ATTR_RE.findall(tag)}


def parse_bounds(value: Optional[str]) -> Optional[Bounds]:
    """Parse `[x1,y1][x2,y2]`; None when absent or malformed."""
    if not value:
        return None
    match = _BOUNDS_RE.search(value)
    if not match:
        return None
    try:
        x1, y1, x2, y2 = (int(number) for number in match.groups())
    except ValueError:
        # Over-long digit strings exceed the int conversion limit
        return None
    return Bounds(x1, y1, x2, y2)


def _parse_leading_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    match = _LEADING_INT_RE.match(value)
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def _flag(attrs: Dict[str, str], name: str) -> bool:
    return attrs.get(name) == "true"


def parse_ui_elements(xml: str) -> List[UIElement]:
    """Turn dump text into UIElements, one per `<node>` tag, in document order."""
    elements = []
    fallback_index = 0

    for match in _NODE_RE.finditer(xml):
        attrs = parse_attributes(match.group(0))
        bounds = parse_bounds(attrs.get("bounds")) or Bounds.zero()
        index = _parse_leading_int(attrs.get("index"))

        elements.append(
            UIElement(
                index=fallback_index if index is None else index,
                text=attrs.get("text", ""),
                class_name=attrs.get("class", ""),
                resource_id=attrs.get("resource-id", ""),
                content_desc=attrs.get("content-desc", ""),
                bounds=bounds,
                checkable=_flag(attrs, "checkable"),
                checked=_flag(attrs, "checked"),
                clickable=_flag(attrs, "clickable"),
                enabled=_flag(attrs, "enabled"),
                focused=_flag(attrs, "focused"),
                scrollable=_flag(attrs, "scrollable"),
                selected=_flag(attrs, "selected"),
            )
        )
        fallback_index += 1

    return elements
