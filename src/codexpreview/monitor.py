from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path
from typing import Optional

from codexpreview.diffview import DiffPresenter
from codexpreview.errors import PreviewPathError
from codexpreview.files import FileReader, FileSystemFileReader
from codexpreview.logger import logger
from codexpreview.paths import resolve_preview_path
from codexpreview.preview import (
    LineKind,
    PreviewBlock,
    apply_edits,
    fingerprint,
    parse_preview,
    preview_tail,
)
from codexpreview.settings import MonitorSettings
from codexpreview.sources import BufferSource
from codexpreview.state import ChangeSnapshotStore, PreviewStateTracker


class PreviewOutcome(str, Enum):
    DISABLED = "disabled"
    NO_BUFFER = "no_buffer"
    NO_BLOCK = "no_block"
    UNCHANGED = "unchanged"
    FULL_FILE = "full_file"
    SNIPPET = "snippet"
    FAILED = "failed"


def snippet_title(block: PreviewBlock) -> str:
    return f"{block.file_path} (Codex preview)"


class PreviewMonitor:
    """
    Watches a terminal buffer for edit previews and opens a diff for each
    new one.

    Each poll only re-parses when the text after the last preview marker
    changed since the previous poll. A preview is first shown as a full-file
    diff by patching the current file; if that is not possible the parsed
    snippet pair is shown instead.
    """

    def __init__(
        self,
        source: BufferSource,
        presenter: DiffPresenter,
        *,
        reader: Optional[FileReader] = None,
        tracker: Optional[PreviewStateTracker] = None,
        snapshots: Optional[ChangeSnapshotStore] = None,
        project_root: Optional[Path] = None,
        settings: Optional[MonitorSettings] = None,
    ) -> None:
        self._settings = settings or MonitorSettings()
        self._source = source
        self._presenter = presenter
        root = project_root or self._settings.project_root
        # Resolved once; the reader joins paths onto it again.
        self._project_root = root.resolve() if root is not None else None
        self._reader = reader or FileSystemFileReader(self._project_root)
        self.tracker = tracker or PreviewStateTracker()
        self.snapshots = snapshots
        self._last_fingerprint: Optional[str] = None

    @property
    def settings(self) -> MonitorSettings:
        return self._settings

    def reset(self) -> None:
        self._last_fingerprint = None

    def _read_buffer(self) -> Optional[str]:
        try:
            return self._source()
        except Exception as exc:
            logger.warning("buffer_read_failed", err=exc)
            return None

    def poll_once(self) -> PreviewOutcome:
        if not self._settings.show_diff_on_change:
            return PreviewOutcome.DISABLED

        text = self._read_buffer()
        if text is None or not text.strip():
            return PreviewOutcome.NO_BUFFER

        tail = preview_tail(text)
        if tail is None:
            return PreviewOutcome.NO_BLOCK

        fp = fingerprint(tail)
        if fp == self._last_fingerprint:
            return PreviewOutcome.UNCHANGED
        self._last_fingerprint = fp

        block = parse_preview(text)
        if block is None:
            return PreviewOutcome.NO_BLOCK

        logger.info("preview_detected", file=block.file_path, edits=len(block.edits))
        return self.open_preview(block)

    def _read_target(self, path: Path) -> Optional[str]:
        try:
            return self._reader.read(path)
        except (OSError, UnicodeDecodeError, PreviewPathError) as exc:
            logger.warning("preview_file_unreadable", path=str(path), err=exc)
            return None

    def _check_header_counts(self, block: PreviewBlock) -> None:
        added = block.count(LineKind.ADD)
        deleted = block.count(LineKind.DELETE)
        if (block.added, block.deleted) != (added, deleted):
            logger.debug(
                "preview_header_count_mismatch",
                file=block.file_path,
                header=(block.added, block.deleted),
                parsed=(added, deleted),
            )

    def open_preview(self, block: PreviewBlock) -> PreviewOutcome:
        try:
            return self._open_preview(block)
        except Exception as exc:
            logger.warning("preview_open_failed", file=block.file_path, err=exc)
            return PreviewOutcome.FAILED

    def _open_preview(self, block: PreviewBlock) -> PreviewOutcome:
        self._check_header_counts(block)
        path = resolve_preview_path(block.file_path, self._project_root)
        current = self._read_target(path)

        if current is not None:
            suggested = apply_edits(
                current, block, strict_context=self._settings.strict_context
            )
            if suggested is not None and suggested != current:
                logger.info("preview_full_file_diff", file=block.file_path)
                self.tracker.mark_shown(str(path))
                if self.snapshots is not None:
                    self.snapshots.record(str(path), current, suggested)
                # Pass the current text as a snapshot so the diff does not
                # collapse once the tool writes the file.
                self._presenter.show_suggestion_diff(str(path), current, suggested)
                return PreviewOutcome.FULL_FILE
            logger.info(
                "preview_full_file_fallback",
                file=block.file_path,
                applied=suggested is not None,
            )
            self.tracker.mark_shown(str(path))

        self._presenter.show_snippet_diff(
            snippet_title(block), block.original_text, block.suggested_text
        )
        return PreviewOutcome.SNIPPET

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Poll until stop_event is set or the task is cancelled."""
        self.reset()
        interval = self._settings.poll_interval
        while stop_event is None or not stop_event.is_set():
            try:
                self.poll_once()
            except Exception as exc:
                logger.exception("preview_monitor_iteration_failed", exc=exc)
            if stop_event is None:
                await asyncio.sleep(interval)
                continue
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
