from __future__ import annotations

from codexpreview.preview import (
    LineEdit,
    LineKind,
    PreviewBlock,
    apply_edits,
    parse_preview,
)

__all__ = [
    "LineEdit",
    "LineKind",
    "PreviewBlock",
    "apply_edits",
    "parse_preview",
]
