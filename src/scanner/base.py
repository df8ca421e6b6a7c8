"""
Base scanner class for structured documents.
"""

import hashlib
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Iterable, Union

from ..models import Diagnostic, DiagnosticKind, FileIndex


def compute_file_hash(content: Union[bytes, str]) -> str:
    """Content hash used for change and rename detection"""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()[:16]


class BaseScanner(ABC):
    """
    Scanner base class

    Subclasses must implement:
    - scan_file(): Build the FileIndex of a single file
    - supported_extensions: List of supported file extensions (lowercase, with dot)
    """

    supported_extensions: tuple[str, ...] = ()

    def __init__(self, extensions: Iterable[str] = None):
        if extensions is not None:
            self.supported_extensions = tuple(e.lower() for e in extensions)

    @abstractmethod
    def scan_file(self, identity: str, content: Union[bytes, str]) -> tuple[FileIndex, list[Diagnostic]]:
        """
        Scan a single file

        Returns:
            (file_index, diagnostics)
        """
        pass

    def can_scan(self, identity: str) -> bool:
        """Check if this file type is supported (case-insensitive)"""
        return PurePosixPath(identity).suffix.lower() in self.supported_extensions

    def compute_file_hash(self, content: Union[bytes, str]) -> str:
        return compute_file_hash(content)


class ScanResult:
    """Scan result container"""

    def __init__(self):
        self.indexes: list[FileIndex] = []
        self.diagnostics: list[Diagnostic] = []
        self.files_scanned = 0

    def add_file_result(self, index: FileIndex, diagnostics: list[Diagnostic]):
        self.indexes.append(index)
        self.diagnostics.extend(diagnostics)

    def add_diagnostic(self, diagnostic: Diagnostic):
        self.diagnostics.append(diagnostic)

    def errors(self) -> list[dict]:
        return [d.to_dict() for d in self.diagnostics]

    def summary(self) -> dict:
        return {
            "files_scanned": self.files_scanned,
            "files_indexed": len(self.indexes),
            "entries_found": sum(len(i.entries) for i in self.indexes),
            "errors": sum(
                1 for d in self.diagnostics
                if d.kind in (DiagnosticKind.PARSE_FAILURE, DiagnosticKind.FILE_TOO_LARGE)
            ),
            "warnings": sum(1 for d in self.diagnostics if d.kind == DiagnosticKind.UNSUPPORTED_NODE),
        }
