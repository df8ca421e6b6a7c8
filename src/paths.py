"""
Key path helpers.

Paths are '/'-delimited while a file is indexed and '.'-delimited once
merged into the answer set:
    server//port/  ->  server/port  ->  server.port
"""

import re

PATH_SEPARATOR = "/"
MERGED_SEPARATOR = "."

_REPEATED_SEPARATORS = re.compile(re.escape(PATH_SEPARATOR) + "{2,}")


def normalize_path(path: str, keep_leading: bool = False, strip_trailing: bool = True) -> str:
    """
    Canonicalize a '/'-delimited path.

    Args:
        path: the path to normalize
        keep_leading: whether the result should begin with a separator
        strip_trailing: whether one trailing separator is removed

    Returns:
        normalized path ("" stays "")
    """
    if path == "":
        return ""

    normalized = PATH_SEPARATOR + path if keep_leading else path
    normalized = _REPEATED_SEPARATORS.sub(PATH_SEPARATOR, normalized)

    if not keep_leading and normalized.startswith(PATH_SEPARATOR):
        normalized = normalized[1:]

    if strip_trailing and normalized.endswith(PATH_SEPARATOR):
        normalized = normalized[:-1]

    return normalized


def normalize_standard(path: str) -> str:
    return normalize_path(path, keep_leading=False, strip_trailing=True)


def join_path(base: str, key: str) -> str:
    """Append a key to a base path and normalize."""
    return normalize_standard(f"{base}{PATH_SEPARATOR}{key}")


def split_path(path: str) -> list[str]:
    return [segment for segment in path.split(PATH_SEPARATOR) if segment]


def canonical_path(path: str) -> str:
    """Merge key for a path: server/port -> server.port"""
    return path.replace(PATH_SEPARATOR, MERGED_SEPARATOR)
