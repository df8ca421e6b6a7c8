"""Tests for key expansion, merging and prefix filtering."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from src.mapper import (
    build_key_map,
    expand_entries,
    filter_keys,
    merge_entries,
    normalize_query,
)
from src.models import ConfigEntry, FileIndex


def make_index(identity: str, *entries: tuple) -> FileIndex:
    return FileIndex(identity, tuple(ConfigEntry(p, i) for p, i in entries))


class TestExpandEntries:
    """Test expand_entries()."""

    def test_keeps_original_entries(self):
        entries = [ConfigEntry("a", "1")]
        assert expand_entries(entries) == entries

    def test_adds_annotated_prefixes(self):
        expanded = expand_entries([ConfigEntry("server/port", "8080")])
        assert expanded == [
            ConfigEntry("server/port", "8080"),
            ConfigEntry("server", "port: 8080"),
        ]

    def test_every_strict_prefix(self):
        expanded = expand_entries([ConfigEntry("a/b/c", "v")])
        assert ConfigEntry("a", "c: v") in expanded
        assert ConfigEntry("a/b", "c: v") in expanded
        assert len(expanded) == 3

    def test_empty_item_gives_empty_annotation(self):
        expanded = expand_entries([ConfigEntry("a/b", "")])
        assert expanded == [ConfigEntry("a/b", ""), ConfigEntry("a", "")]

    def test_empty_check_uses_value_equality(self):
        item = "".join([])  # a fresh empty string, not the literal
        expanded = expand_entries([ConfigEntry("a/b", item)])
        assert expanded[1] == ConfigEntry("a", "")


class TestMergeEntries:
    """Test merge_entries()."""

    def test_single_entry_kept(self):
        merged = merge_entries([ConfigEntry("db/host", "x")])
        assert merged == {"db.host": ConfigEntry("db.host", "x")}

    def test_concatenates_distinct_items(self):
        merged = merge_entries([ConfigEntry("db/host", "x"), ConfigEntry("db/host", "y")])
        assert merged["db.host"].item == "x | y"

    def test_duplicates_collapse(self):
        merged = merge_entries([ConfigEntry("db/host", "x"), ConfigEntry("db/host", "x")])
        assert merged["db.host"].item == "x"

    def test_empty_items_skipped(self):
        merged = merge_entries([
            ConfigEntry("db", ""),
            ConfigEntry("db", "host: x"),
            ConfigEntry("db", ""),
        ])
        assert merged["db"].item == "host: x"

    def test_all_empty(self):
        merged = merge_entries([ConfigEntry("db", ""), ConfigEntry("db", "")])
        assert merged["db"].item == ""

    def test_deterministic(self):
        entries = [ConfigEntry("a", "1"), ConfigEntry("a", "2"), ConfigEntry("b", "3")]
        assert merge_entries(entries) == merge_entries(list(entries))


class TestBuildKeyMap:
    """Test build_key_map() across file indexes."""

    def test_end_to_end_example(self):
        index = make_index(
            "a.yaml",
            ("server", ""),
            ("server/port", "8080"),
            ("server/name", "prod"),
        )
        key_map = build_key_map([index])
        assert key_map == {
            "server": ConfigEntry("server", "port: 8080 | name: prod"),
            "server.port": ConfigEntry("server.port", "8080"),
            "server.name": ConfigEntry("server.name", "prod"),
        }

    def test_merge_across_files(self):
        key_map = build_key_map([
            make_index("a.yaml", ("db", ""), ("db/host", "x")),
            make_index("b.yaml", ("db", ""), ("db/host", "y")),
        ])
        assert key_map["db.host"] == ConfigEntry("db.host", "x | y")
        assert key_map["db"] == ConfigEntry("db", "host: x | host: y")

    def test_ancestors_present(self):
        key_map = build_key_map([make_index("a.yaml", ("a", ""), ("a/b", ""), ("a/b/c", "v"))])
        assert {"a", "a.b", "a.b.c"} <= set(key_map)

    def test_no_indexes(self):
        assert build_key_map([]) == {}


class TestFilterKeys:
    """Test prefix filtering."""

    KEYS = [
        ConfigEntry("server", ""),
        ConfigEntry("server.port", "8080"),
        ConfigEntry("database.host", "x"),
    ]

    def test_prefix(self):
        assert [k.path for k in filter_keys(self.KEYS, "server")] == ["server", "server.port"]

    def test_empty_prefix_returns_all(self):
        assert filter_keys(self.KEYS, "") == self.KEYS

    def test_slash_query(self):
        assert [k.path for k in filter_keys(self.KEYS, "server/p")] == ["server.port"]

    @pytest.mark.parametrize("query,expected", [
        ('"server.', "server."),
        ("'db", "db"),
        ("a/b", "a.b"),
        ("  x ", "x"),
    ])
    def test_normalize_query(self, query, expected):
        assert normalize_query(query) == expected
