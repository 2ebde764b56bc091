from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class LineKind(str, Enum):
    CONTEXT = "context"
    ADD = "add"
    DELETE = "delete"


@dataclass(frozen=True)
class LineEdit:
    """
    One line of a preview block.

    line_number is the 1-based index into the file as it looked when the
    preview was rendered. For ADD lines it is the position the new line is
    inserted at.
    """

    line_number: int
    kind: LineKind
    text: str


@dataclass(frozen=True)
class PreviewBlock:
    file_path: str
    edits: Tuple[LineEdit, ...] = field(default_factory=tuple)
    # Display-only counts from the "(+A -D)" header.
    added: Optional[int] = None
    deleted: Optional[int] = None

    def _join(self, keep: LineKind) -> str:
        return "\n".join(
            e.text for e in self.edits if e.kind in (LineKind.CONTEXT, keep)
        )

    @property
    def original_text(self) -> str:
        return self._join(LineKind.DELETE)

    @property
    def suggested_text(self) -> str:
        return self._join(LineKind.ADD)

    def count(self, kind: LineKind) -> int:
        return sum(1 for e in self.edits if e.kind == kind)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "added": self.added,
            "deleted": self.deleted,
            "edits": [
                {"line": e.line_number, "kind": e.kind.value, "text": e.text}
                for e in self.edits
            ],
            "original_text": self.original_text,
            "suggested_text": self.suggested_text,
        }
