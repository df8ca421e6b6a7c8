"""Key map - expansion and merge of indexed key paths"""
from .key_map import (
    ITEM_SEPARATOR,
    build_key_map,
    expand_entries,
    filter_keys,
    merge_entries,
    normalize_query,
)

__all__ = [
    "ITEM_SEPARATOR",
    "build_key_map",
    "expand_entries",
    "filter_keys",
    "merge_entries",
    "normalize_query",
]
