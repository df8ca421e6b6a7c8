"""
Indexer configuration.

Defaults can be overridden through environment variables:
    YAMLKEY_INDEX_EXTENSIONS     comma separated, e.g. "yaml,yml"
    YAMLKEY_INDEX_IGNORE         comma separated directory names
    YAMLKEY_INDEX_MAX_FILE_SIZE  bytes
    YAMLKEY_INDEX_POLL_INTERVAL  seconds
    YAMLKEY_INDEX_WATCHDOG       "0" to fall back to polling
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

ENV_PREFIX = "YAMLKEY_INDEX_"

DEFAULT_EXTENSIONS = (".yaml", ".yml")

DEFAULT_IGNORE_PATTERNS = [
    "node_modules", "__pycache__", ".git", "dist", "build",
    ".venv", "venv", ".pytest_cache", ".mypy_cache", ".idea", ".tox",
]

DEFAULT_MAX_FILE_SIZE = 1_048_576  # 1MB


def normalize_extension(ext: str) -> str:
    """'YAML' -> '.yaml'"""
    ext = ext.strip().lower()
    if not ext:
        return ""
    return ext if ext.startswith(".") else f".{ext}"


def _split_list(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class IndexerConfig:
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    ignore_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    poll_interval: float = 1.0
    use_watchdog: bool = True

    def __post_init__(self):
        self.extensions = tuple(
            e for e in (normalize_extension(x) for x in self.extensions) if e
        )
        if not self.extensions:
            raise ValueError("At least one file extension is required")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "IndexerConfig":
        """
        Build a config from environment variables, falling back to defaults.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        raw = env.get(f"{ENV_PREFIX}EXTENSIONS")
        if raw:
            kwargs["extensions"] = tuple(_split_list(raw))

        raw = env.get(f"{ENV_PREFIX}IGNORE")
        if raw:
            kwargs["ignore_patterns"] = _split_list(raw)

        raw = env.get(f"{ENV_PREFIX}MAX_FILE_SIZE")
        if raw:
            try:
                kwargs["max_file_size"] = int(raw)
            except ValueError:
                raise ValueError(f"Invalid {ENV_PREFIX}MAX_FILE_SIZE: {raw!r}") from None

        raw = env.get(f"{ENV_PREFIX}POLL_INTERVAL")
        if raw:
            try:
                kwargs["poll_interval"] = float(raw)
            except ValueError:
                raise ValueError(f"Invalid {ENV_PREFIX}POLL_INTERVAL: {raw!r}") from None

        raw = env.get(f"{ENV_PREFIX}WATCHDOG")
        if raw is not None:
            kwargs["use_watchdog"] = raw != "0"

        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "extensions": list(self.extensions),
            "ignore_patterns": list(self.ignore_patterns),
            "max_file_size": self.max_file_size,
            "poll_interval": self.poll_interval,
            "use_watchdog": self.use_watchdog,
        }
