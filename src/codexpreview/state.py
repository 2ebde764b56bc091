from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Set

from codexpreview.logger import logger


class PreviewStateTracker:
    """
    Remembers which files already had a preview diff shown, so a later
    generic diff for the same file can be suppressed once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._shown: Set[str] = set()

    def mark_shown(self, path: str) -> None:
        with self._lock:
            self._shown.add(path)
        logger.debug("preview_marked_shown", path=path)

    def consume_shown(self, path: str) -> bool:
        """Return True if a preview was shown for path, clearing the mark."""
        with self._lock:
            if path not in self._shown:
                return False
            self._shown.discard(path)
        logger.debug("preview_mark_consumed", path=path)
        return True

    def clear(self) -> None:
        with self._lock:
            self._shown.clear()


@dataclass(frozen=True)
class ChangeSnapshot:
    file_path: str
    # None when the file did not exist before the change.
    original_text: Optional[str]
    new_text: str


class SnapshotWriter(ABC):
    @abstractmethod
    def write(self, path: str, content: str) -> None: ...

    @abstractmethod
    def delete(self, path: str) -> None: ...


class FileSystemSnapshotWriter(SnapshotWriter):
    def write(self, path: str, content: str) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("wt", encoding="utf-8", newline="") as fh:
            fh.write(content)

    def delete(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)


class ChangeSnapshotStore:
    """Before/after contents of files touched by the latest run, for revert."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshots: Dict[str, ChangeSnapshot] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    def record(self, path: str, original_text: Optional[str], new_text: str) -> None:
        snapshot = ChangeSnapshot(
            file_path=path, original_text=original_text, new_text=new_text
        )
        with self._lock:
            self._snapshots[path] = snapshot
        logger.info(
            "snapshot_recorded", path=path, original=original_text is not None
        )

    def get(self, path: str) -> Optional[ChangeSnapshot]:
        with self._lock:
            return self._snapshots.get(path)

    def revert(self, path: str, writer: Optional[SnapshotWriter] = None) -> bool:
        """
        Restore path to its recorded original content. Files that did not
        exist before are deleted. Returns False when nothing was reverted.
        """
        snapshot = self.get(path)
        if snapshot is None:
            logger.info("snapshot_missing", path=path)
            return False

        writer = writer or FileSystemSnapshotWriter()
        try:
            if snapshot.original_text is None:
                writer.delete(path)
                logger.info("snapshot_reverted_by_delete", path=path)
            else:
                writer.write(path, snapshot.original_text)
                logger.info("snapshot_reverted", path=path)
        except OSError as exc:
            logger.warning("snapshot_revert_failed", path=path, err=exc)
            return False
        return True

    def clear(self) -> None:
        with self._lock:
            self._snapshots.clear()
