"""
Key map - the merged, queryable view over all file indexes.

Two steps:
1. expand: every strict prefix of a path becomes an entry too, annotated
   with what lies below it
       (server/port, "8080")  ->  (server, "port: 8080")
2. merge: entries are keyed by their '.'-delimited path; distinct
   non-empty items of one key are joined with " | "
       (db/host, "x") + (db/host, "y")  ->  (db.host, "x | y")
"""

from typing import Iterable

from ..models import ConfigEntry, FileIndex
from ..paths import PATH_SEPARATOR, canonical_path, split_path

ITEM_SEPARATOR = " | "


def expand_entries(entries: Iterable[ConfigEntry]) -> list[ConfigEntry]:
    """Keep every entry and add one annotated entry per strict path prefix."""
    expanded: list[ConfigEntry] = []
    for entry in entries:
        expanded.append(entry)
        segments = split_path(entry.path)
        if len(segments) < 2:
            continue

        last_segment = segments[-1]
        annotation = "" if entry.item == "" else f"{last_segment}: {entry.item}"
        for depth in range(1, len(segments)):
            prefix = PATH_SEPARATOR.join(segments[:depth])
            expanded.append(ConfigEntry(prefix, annotation))
    return expanded


def merge_entries(entries: Iterable[ConfigEntry]) -> dict[str, ConfigEntry]:
    """
    Deduplicate entries by canonical path.

    Returns:
        {canonical_path: ConfigEntry} in first-seen order
    """
    items: dict[str, list[str]] = {}
    for entry in entries:
        key = canonical_path(entry.path)
        values = items.setdefault(key, [])
        if entry.item != "" and entry.item not in values:
            values.append(entry.item)

    return {
        key: ConfigEntry(key, ITEM_SEPARATOR.join(values))
        for key, values in items.items()
    }


def build_key_map(indexes: Iterable[FileIndex]) -> dict[str, ConfigEntry]:
    """Expand and merge the entries of all given file indexes."""
    union = (entry for index in indexes for entry in index.entries)
    return merge_entries(expand_entries(union))


def normalize_query(query: str) -> str:
    """
    Clean up a completion query.

    The caret text of a string literal still carries its opening quote;
    '/' is accepted as a separator as well as '.'.
    """
    query = query.strip()
    if query[:1] in ("'", '"'):
        query = query[1:]
    return canonical_path(query)


def filter_keys(entries: Iterable[ConfigEntry], prefix: str) -> list[ConfigEntry]:
    """Keep entries whose merged path starts with prefix."""
    prefix = normalize_query(prefix)
    if not prefix:
        return list(entries)
    return [e for e in entries if e.path.startswith(prefix)]
