from __future__ import annotations

from typing import List, Optional

from codexpreview.logger import logger

from .models import LineEdit, LineKind, PreviewBlock


_KIND_ORDER = {
    LineKind.DELETE: 0,
    LineKind.CONTEXT: 1,
    LineKind.ADD: 2,
}


def kind_order(kind: LineKind) -> int:
    return _KIND_ORDER[kind]


def _sort_key(edit: LineEdit) -> tuple[int, int]:
    return edit.line_number, kind_order(edit.kind)


def apply_edits(
    current_full_text: str,
    block: PreviewBlock,
    *,
    strict_context: bool = False,
) -> Optional[str]:
    """
    Rebuild the full suggested file by applying block.edits to the current text.

    Line numbers refer to the file as it was when the preview was rendered.
    Edits are applied in (line_number, DELETE < CONTEXT < ADD) order, so at a
    given line the existing line is checked or removed before anything is
    inserted there. A running offset tracks how earlier inserts and removals
    shift later indices; lines added at the number of a removed line replace
    it in place.

    CONTEXT lines are a soft check: whitespace is ignored and a mismatch is
    only logged, unless strict_context is set.

    Returns None when any target index falls outside the current lines.
    """
    edits = block.edits
    if not edits:
        return None

    lines: List[str] = current_full_text.split("\n")
    offset = 0
    # Deletions already applied at the current line number. An ADD sharing
    # that number goes where the deleted line was, not above it.
    delete_line = 0
    deletes_on_line = 0

    for edit in sorted(edits, key=_sort_key):
        target = edit.line_number - 1 + offset
        if edit.kind == LineKind.ADD and edit.line_number == delete_line:
            target += deletes_on_line
        if target < 0 or target > len(lines):
            logger.warning(
                "preview_target_out_of_bounds",
                file=block.file_path,
                line=edit.line_number,
                target=target,
                size=len(lines),
            )
            return None

        if edit.kind == LineKind.CONTEXT:
            if target >= len(lines):
                logger.warning(
                    "preview_context_out_of_bounds",
                    file=block.file_path,
                    target=target,
                )
                return None
            expected = edit.text.strip()
            actual = lines[target].strip()
            if expected and expected != actual:
                logger.warning(
                    "preview_context_mismatch",
                    file=block.file_path,
                    line=edit.line_number,
                    expected=expected,
                    actual=actual,
                )
                if strict_context:
                    return None
        elif edit.kind == LineKind.DELETE:
            if target >= len(lines):
                logger.warning(
                    "preview_delete_out_of_bounds",
                    file=block.file_path,
                    target=target,
                )
                return None
            del lines[target]
            offset -= 1
            if edit.line_number != delete_line:
                delete_line = edit.line_number
                deletes_on_line = 0
            deletes_on_line += 1
        else:
            lines.insert(target, edit.text)
            offset += 1

    return "\n".join(lines)
