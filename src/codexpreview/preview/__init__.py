from __future__ import annotations

from .apply import apply_edits, kind_order
from .models import LineEdit, LineKind, PreviewBlock
from .parser import (
    PREVIEW_MARKER,
    fingerprint,
    parse_edit_line,
    parse_preview,
    preview_tail,
)

__all__ = [
    "PREVIEW_MARKER",
    "LineEdit",
    "LineKind",
    "PreviewBlock",
    "apply_edits",
    "fingerprint",
    "kind_order",
    "parse_edit_line",
    "parse_preview",
    "preview_tail",
]
