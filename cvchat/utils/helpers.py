"""Helpers for coercing loosely typed JSON (model output, stored records) into stable shapes."""

from datetime import datetime
from typing import Any, List, Optional


def as_dict(value: Any) -> dict:
    """Return value if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_str(value: Any) -> str:
    """Return value if it is a string, else an empty string."""
    return value if isinstance(value, str) else ""


def as_list(value: Any) -> list:
    """Return value if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def as_str_list(value: Any) -> List[str]:
    """Keep only the string items of a list; anything else collapses to []."""
    return [item for item in as_list(value) if isinstance(item, str)]


def as_loose_items(value: Any) -> list:
    """
    Keep list items that are strings or flat dicts.
    Dict items keep only their string-valued keys, so nested junk never reaches callers.
    """
    items = []
    for item in as_list(value):
        if isinstance(item, str):
            items.append(item)
        elif isinstance(item, dict):
            items.append({str(k): v for k, v in item.items() if isinstance(v, str)})
    return items


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
