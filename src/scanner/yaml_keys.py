"""
YAML key scanner.

Walks a parsed document and emits one entry per key path:

    server:
      port: 8080        ->  server        ""
      name: prod            server/port   "8080"
                            server/name   "prod"

Sequences, booleans and other non-scalar values are skipped with a
diagnostic; null values contribute nothing.
"""

import logging
from datetime import datetime
from typing import Optional, Union

import yaml

from .base import BaseScanner
from ..config import DEFAULT_EXTENSIONS
from ..models import ConfigEntry, Diagnostic, DiagnosticKind, FileIndex, NodeKind, classify_node
from ..paths import join_path

logger = logging.getLogger(__name__)


BOOL_TAG = "tag:yaml.org,2002:bool"
STR_TAG = "tag:yaml.org,2002:str"


class KeyPreservingLoader(yaml.SafeLoader):
    """
    SafeLoader that keeps boolean-looking mapping keys as written.

    YAML 1.1 resolves plain `on`, `off`, `yes` and `no` to booleans, which
    would turn a key like `on:` into True. Values are left alone.
    """

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            # resolve merge keys first so merged-in keys are covered too
            self.flatten_mapping(node)
            for key_node, _ in node.value:
                if isinstance(key_node, yaml.ScalarNode) and key_node.tag == BOOL_TAG:
                    key_node.tag = STR_TAG
        return super().construct_mapping(node, deep=deep)


def flatten_tree(
    node,
    base_path: str = "",
    identity: str = "",
    diagnostics: Optional[list[Diagnostic]] = None,
) -> list[ConfigEntry]:
    """
    Flatten a mapping into (path, item) entries, containers before children.

    Args:
        node: parsed document node (dict expected, None allowed)
        base_path: path of node itself
        identity: file identity, used in diagnostics only
        diagnostics: list that collects UNSUPPORTED_NODE diagnostics

    Returns:
        Entries in document key order
    """
    entries: list[ConfigEntry] = []
    _walk(node, base_path, identity, entries, diagnostics)
    return entries


def _walk(node, base_path, identity, entries, diagnostics):
    kind = classify_node(node)
    if kind == NodeKind.ABSENT:
        return
    if kind != NodeKind.MAPPING:
        _report_unsupported(base_path or "<root>", node, identity, diagnostics)
        return

    for key, value in node.items():
        path = join_path(base_path, str(key))
        value_kind = classify_node(value)

        if value_kind == NodeKind.MAPPING:
            entries.append(ConfigEntry(path, ""))
            _walk(value, path, identity, entries, diagnostics)
        elif value_kind == NodeKind.SCALAR:
            entries.append(ConfigEntry(path, str(value)))
        elif value_kind == NodeKind.UNSUPPORTED:
            _report_unsupported(path, value, identity, diagnostics)


def _report_unsupported(path, value, identity, diagnostics):
    message = f"YAML contains object of unsupported type {type(value).__name__} at {path}"
    logger.warning(f"{identity or '<memory>'}: {message}")
    if diagnostics is not None:
        diagnostics.append(Diagnostic(identity, DiagnosticKind.UNSUPPORTED_NODE, message))


class YamlScanner(BaseScanner):
    """
    YAML document scanner.

    A malformed document produces an empty FileIndex and a
    PARSE_FAILURE diagnostic instead of raising.
    """

    supported_extensions = DEFAULT_EXTENSIONS

    def parse(self, content: Union[bytes, str]):
        """
        Parse one YAML document with the safe loader.

        Boolean-looking keys (on, yes, ...) stay strings.

        Raises:
            yaml.YAMLError: If the document is malformed
        """
        return yaml.load(content, Loader=KeyPreservingLoader)

    def scan_file(self, identity: str, content: Union[bytes, str]) -> tuple[FileIndex, list[Diagnostic]]:
        diagnostics: list[Diagnostic] = []
        indexed_at = datetime.now().isoformat()
        content_hash = self.compute_file_hash(content)

        try:
            document = self.parse(content)
            entries = flatten_tree(document, identity=identity, diagnostics=diagnostics)
        except (yaml.YAMLError, UnicodeDecodeError, RecursionError) as e:
            logger.warning(f"Unable to parse YAML file {identity}: {e}")
            diagnostics = [Diagnostic(identity, DiagnosticKind.PARSE_FAILURE, str(e))]
            entries = []

        index = FileIndex(
            identity=identity,
            entries=tuple(entries),
            content_hash=content_hash,
            indexed_at=indexed_at,
        )
        return index, diagnostics
