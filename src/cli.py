"""
Command-line interface for YAML Key Index.

Usage:
    yamlkey-index scan [path] [--progress]
    yamlkey-index keys [path] [--prefix <query>] [--json]
    yamlkey-index files [path]
    yamlkey-index watch [path] [--poll] [--interval <seconds>]
"""

import argparse
import json
import logging
import sys
import threading
from pathlib import Path

from .config import IndexerConfig
from .engine import KeyIndexEngine
from .indexer import IndexUpdater
from .watcher import PollingWatcher, create_watcher


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="YAML Key Index - live index of YAML key paths"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # scan
    scan_parser = subparsers.add_parser("scan", help="Index a project and print a summary")
    scan_parser.add_argument("path", nargs="?", default=".", help="Project root path (default: current directory)")
    scan_parser.add_argument("--progress", action="store_true", help="Show a progress bar")

    # keys
    keys_parser = subparsers.add_parser("keys", help="List merged key paths")
    keys_parser.add_argument("path", nargs="?", default=".", help="Project root path (default: current directory)")
    keys_parser.add_argument("--prefix", default="", help="Only keys starting with this query")
    keys_parser.add_argument("--json", action="store_true", dest="as_json", help="Output as JSON")

    # files
    files_parser = subparsers.add_parser("files", help="List indexed files")
    files_parser.add_argument("path", nargs="?", default=".", help="Project root path (default: current directory)")

    # watch
    watch_parser = subparsers.add_parser("watch", help="Index, then follow file changes")
    watch_parser.add_argument("path", nargs="?", default=".", help="Project root path (default: current directory)")
    watch_parser.add_argument("--poll", action="store_true", help="Poll instead of native notifications")
    watch_parser.add_argument("--interval", type=float, help="Polling interval in seconds")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    try:
        if args.command == "scan":
            result = cmd_scan(args)
        elif args.command == "keys":
            result = cmd_keys(args)
        elif args.command == "files":
            result = cmd_files(args)
        elif args.command == "watch":
            result = cmd_watch(args)
        else:
            parser.print_help()
            return

        if result is None:
            pass  # Command handled its own output
        elif isinstance(result, str):
            print(result)
        else:
            print(json.dumps(result, indent=2, ensure_ascii=False))

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _build_engine(path: str) -> KeyIndexEngine:
    project_path = Path(path).resolve()
    if not project_path.is_dir():
        raise FileNotFoundError(f"Path does not exist: {project_path}")
    return KeyIndexEngine(project_path, IndexerConfig.from_env())


def cmd_scan(args):
    """Index a project and return the scan summary."""
    engine = _build_engine(args.path)
    return engine.scan(show_progress=args.progress)


def cmd_keys(args):
    """List the merged key set, optionally filtered by prefix."""
    engine = _build_engine(args.path)
    engine.scan()
    keys = engine.query(args.prefix)

    if args.as_json:
        return [k.to_dict() for k in keys]

    lines = [f"{k.path}\t{k.item}" if k.item else k.path for k in keys]
    return "\n".join(lines)


def cmd_files(args):
    """List indexed files with their entry counts."""
    engine = _build_engine(args.path)
    engine.scan()
    return {
        "root": str(engine.project_root),
        "files": [
            {"file": index.identity, "entries": len(index.entries), "hash": index.content_hash}
            for index in engine.store.all()
        ],
    }


def cmd_watch(args):
    """Index the project, then apply file changes until interrupted."""
    engine = _build_engine(args.path)
    summary = engine.scan()
    print(f"Indexed {summary['files_indexed']} files, {len(engine.get_keys())} keys. Watching for changes...")

    updater = IndexUpdater(engine)
    updater.start()
    watcher = create_watcher(engine, updater, polling=True if args.poll else None)
    stop_event = threading.Event()

    try:
        if isinstance(watcher, PollingWatcher):
            watcher.run(interval=args.interval, stop_event=stop_event)
        else:
            watcher.start()
            while not stop_event.wait(1.0):
                pass
    except KeyboardInterrupt:
        print("\nStopping...")
    finally:
        if not isinstance(watcher, PollingWatcher):
            watcher.stop()
        updater.stop()

    return engine.stats()
