"""Scanner module exports."""

from .base import BaseScanner, ScanResult, compute_file_hash
from .yaml_keys import YamlScanner, flatten_tree

__all__ = [
    "BaseScanner",
    "ScanResult",
    "YamlScanner",
    "compute_file_hash",
    "flatten_tree",
]
