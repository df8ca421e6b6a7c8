"""Tests for CLI commands: scan, keys, files."""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from src.cli import cmd_files, cmd_keys, cmd_scan, main


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_args(**kwargs):
    """Create a simple namespace object for argparse-style args."""
    from argparse import Namespace
    return Namespace(**kwargs)


def write_yaml_files(tmp_path: Path) -> Path:
    """Write a small project with two YAML files and one broken file."""
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "dev.yaml").write_text("db:\n  host: localhost\n  port: 5432\n")
    (tmp_path / "config" / "prod.yaml").write_text("db:\n  host: db.internal\n")
    (tmp_path / "broken.yaml").write_text("db: [oops\n")
    return tmp_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EXTENSIONS", "IGNORE", "MAX_FILE_SIZE", "POLL_INTERVAL", "WATCHDOG"):
        monkeypatch.delenv(f"YAMLKEY_INDEX_{name}", raising=False)


# ---------------------------------------------------------------------------
# Command functions
# ---------------------------------------------------------------------------

class TestCmdScan:
    """Test cmd_scan()."""

    def test_summary(self, tmp_path):
        root = write_yaml_files(tmp_path)
        result = cmd_scan(make_args(path=str(root), progress=False))
        assert result["files_scanned"] == 3
        assert result["files_indexed"] == 3
        assert result["errors"] == 1

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            cmd_scan(make_args(path=str(tmp_path / "nope"), progress=False))


class TestCmdKeys:
    """Test cmd_keys()."""

    def test_json(self, tmp_path):
        root = write_yaml_files(tmp_path)
        result = cmd_keys(make_args(path=str(root), prefix="", as_json=True))
        keys = {k["path"]: k["item"] for k in result}
        assert keys["db.host"] == "localhost | db.internal"
        assert keys["db.port"] == "5432"
        assert keys["db"] == "host: localhost | port: 5432 | host: db.internal"

    def test_text_with_prefix(self, tmp_path):
        root = write_yaml_files(tmp_path)
        result = cmd_keys(make_args(path=str(root), prefix="db.p", as_json=False))
        assert result == "db.port\t5432"


class TestCmdFiles:
    """Test cmd_files()."""

    def test_lists_files(self, tmp_path):
        root = write_yaml_files(tmp_path)
        result = cmd_files(make_args(path=str(root)))
        files = {f["file"]: f["entries"] for f in result["files"]}
        assert files == {"broken.yaml": 0, "config/dev.yaml": 3, "config/prod.yaml": 2}


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class TestMain:
    """Test the argparse entry point."""

    def test_keys_json_output(self, tmp_path, capsys):
        root = write_yaml_files(tmp_path)
        main(["keys", str(root), "--json"])
        out = json.loads(capsys.readouterr().out)
        assert {"path": "db.port", "item": "5432"} in out

    def test_scan_output(self, tmp_path, capsys):
        root = write_yaml_files(tmp_path)
        main(["scan", str(root)])
        out = json.loads(capsys.readouterr().out)
        assert out["entries_found"] == 5

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage" in capsys.readouterr().out.lower()

    def test_error_exits_nonzero(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["keys", str(tmp_path / "missing")])
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err
