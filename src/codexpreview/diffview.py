from __future__ import annotations

import difflib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from rich import console as rich_console
from rich import syntax as rich_syntax
from rich import text as rich_text

from codexpreview.files import FileReader, FileSystemFileReader
from codexpreview.logger import logger

ORIGINAL_LABEL = "Original"
SUGGESTED_LABEL = "Codex suggestion"


class DiffPresenter(ABC):
    """Shows two texts side by side. Never writes files."""

    @abstractmethod
    def show_snippet_diff(
        self, title: str, original_snippet: str, suggested_snippet: str
    ) -> None: ...

    @abstractmethod
    def show_suggestion_diff(
        self,
        file_path: str,
        original_snapshot: Optional[str],
        suggested_content: str,
    ) -> None:
        """
        Show a full-file diff. original_snapshot is used verbatim when given
        so the left side stays stable if the file changes afterwards; when
        None the current file content (empty for new files) is used.
        """
        ...


def suggestion_title(file_path: str) -> str:
    name = Path(file_path).name or file_path
    return f"{name} ↔ Suggested"


def unified_diff_text(original: str, suggested: str) -> str:
    diff = difflib.unified_diff(
        original.splitlines(),
        suggested.splitlines(),
        fromfile=ORIGINAL_LABEL,
        tofile=SUGGESTED_LABEL,
        lineterm="",
    )
    return "\n".join(diff)


class RichDiffPresenter(DiffPresenter):
    def __init__(
        self,
        console: Optional[rich_console.Console] = None,
        reader: Optional[FileReader] = None,
    ) -> None:
        self._console = console or rich_console.Console()
        self._reader = reader or FileSystemFileReader()

    def _render(self, title: str, original: str, suggested: str) -> None:
        header = rich_text.Text(no_wrap=True)
        header.append("● ", style="bold cyan")
        header.append(title, style="bold")

        diff_text = unified_diff_text(original, suggested)
        if not diff_text:
            body: rich_console.RenderableType = rich_text.Text(
                "No differences.", style="dim"
            )
        else:
            body = rich_syntax.Syntax(diff_text, "diff")
        self._console.print(rich_console.Group(header, body))

    def show_snippet_diff(
        self, title: str, original_snippet: str, suggested_snippet: str
    ) -> None:
        self._render(title, original_snippet, suggested_snippet)

    def show_suggestion_diff(
        self,
        file_path: str,
        original_snapshot: Optional[str],
        suggested_content: str,
    ) -> None:
        original = original_snapshot
        if original is None:
            original = self._reader.read(Path(file_path)) or ""
        self._render(suggestion_title(file_path), original, suggested_content)
        logger.info("preview_diff_displayed", path=file_path)


class DiffKind(str, Enum):
    SNIPPET = "snippet"
    FULL_FILE = "full_file"


@dataclass(frozen=True)
class DiffRequest:
    kind: DiffKind
    title: str
    original: str
    suggested: str
    file_path: Optional[str] = None


class RecordingDiffPresenter(DiffPresenter):
    """Collects diff requests instead of displaying them."""

    def __init__(self, reader: Optional[FileReader] = None) -> None:
        self._reader = reader or FileSystemFileReader()
        self.requests: List[DiffRequest] = []

    def show_snippet_diff(
        self, title: str, original_snippet: str, suggested_snippet: str
    ) -> None:
        self.requests.append(
            DiffRequest(
                kind=DiffKind.SNIPPET,
                title=title,
                original=original_snippet,
                suggested=suggested_snippet,
            )
        )

    def show_suggestion_diff(
        self,
        file_path: str,
        original_snapshot: Optional[str],
        suggested_content: str,
    ) -> None:
        original = original_snapshot
        if original is None:
            original = self._reader.read(Path(file_path)) or ""
        self.requests.append(
            DiffRequest(
                kind=DiffKind.FULL_FILE,
                title=suggestion_title(file_path),
                original=original,
                suggested=suggested_content,
                file_path=file_path,
            )
        )
