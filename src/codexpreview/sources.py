from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from codexpreview.logger import logger

# Returns the full accumulated terminal text (history + screen), or None
# when the buffer is not available right now.
BufferSource = Callable[[], Optional[str]]


class StaticBufferSource:
    def __init__(self, text: Optional[str]) -> None:
        self.text = text

    def __call__(self) -> Optional[str]:
        return self.text


class FileBufferSource:
    """
    Reads a captured terminal transcript, e.g. from `script -f` or
    `tmux pipe-pane`. Undecodable bytes are replaced.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def __call__(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug("buffer_source_unavailable", path=str(self.path), err=exc)
            return None
