from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from codexpreview.errors import PreviewPathError


class FileReader(ABC):
    """Read-only access to current on-disk file contents."""

    @abstractmethod
    def read(self, path: Path) -> Optional[str]:
        """Return file text, or None when the file does not exist."""
        ...


class FileSystemFileReader(FileReader):
    """
    UTF-8 file reader. When base_path is set, paths that resolve outside of
    it are refused.
    """

    def __init__(self, base_path: Optional[Path] = None):
        self._base_path = base_path

    def _resolve_safe_path(self, path: Path) -> Path:
        if self._base_path is None:
            return path
        abs_path = (self._base_path / path).resolve()
        base_resolved = self._base_path.resolve()
        if abs_path == base_resolved or base_resolved in abs_path.parents:
            return abs_path
        raise PreviewPathError(f"Path escapes project root: {path}")

    def read(self, path: Path) -> Optional[str]:
        resolved = self._resolve_safe_path(path)
        if not resolved.is_file():
            return None
        with resolved.open("rt", encoding="utf-8", newline="") as fh:
            return fh.read()
