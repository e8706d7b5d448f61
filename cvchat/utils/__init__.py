"""Utility exports."""

from .helpers import as_dict, as_list, as_loose_items, as_str, as_str_list, isoformat
from .logger import configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    "as_dict",
    "as_list",
    "as_loose_items",
    "as_str",
    "as_str_list",
    "isoformat",
]
