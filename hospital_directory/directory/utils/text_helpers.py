from __future__ import annotations

import locale
import re
from typing import Any, Optional

from directory.logger import logger

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
WHITESPACE = re.compile(r"\s+")


def clean_text(text: Optional[str]) -> Optional[str]:
    """Collapse runs of whitespace in a CMS string; blank strings become None."""
    if text is None:
        return None
    return WHITESPACE.sub(" ", text).strip() or None


def contains_text(haystack: Optional[str], needle: Optional[str]) -> bool:
    """Case-insensitive substring test; an empty needle never matches."""
    if not needle:
        return False
    return needle.lower() in (haystack or "").lower()


def matches_value(filter_id: str, query: str, item_id: Optional[str], item_name: Optional[str]) -> bool:
    """Match an item against one filter field.

    The item matches when the filter id equals the item id, or when the
    filter query is a case-insensitive substring of the item name.
    """
    if filter_id and item_id == filter_id:
        return True
    return contains_text(item_name, query)


def use_system_collation() -> bool:
    """Collate names by the process locale (LC_COLLATE/LANG).

    Until this runs, Python stays in the C locale and `sort_key` orders by
    code point on casefolded text.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("System locale unavailable, sorting by code point: {}", exc)
        return False
    return True


def sort_key(name: Optional[str]) -> tuple:
    """Case-insensitive sort key for display names, collated by the active LC_COLLATE."""
    text = name or ""
    return (locale.strxfrm(text.casefold()), text)


def is_uuid(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return bool(UUID_PATTERN.match(value))


def format_location(city: Any) -> str:
    """Format a city as "City, State, Country"."""
    if city is None:
        return "Location not specified"
    parts = [
        (getattr(city, "name", None) or "").strip(),
        (getattr(city, "state", None) or "").strip(),
        (getattr(city, "country", None) or "").strip(),
    ]
    parts = [p for p in parts if p]
    return ", ".join(parts) if parts else "Location not specified"
