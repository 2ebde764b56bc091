from __future__ import annotations

import hashlib
import re
from typing import List, Optional, Tuple

from .models import LineEdit, LineKind, PreviewBlock


PREVIEW_MARKER = "Would you like to make the following edits?"

ELLIPSIS_MARK = "⋮"

# "  path/to/File.kt (+A -D)"
HEADER_RE = re.compile(r"^\s*(.+?)\s+\(\+(\d+)\s+-(\d+)\)\s*$")

LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


def preview_tail(full_text: str) -> Optional[str]:
    """Return the text from the last preview marker to the end, or None."""
    idx = full_text.rfind(PREVIEW_MARKER)
    if idx == -1:
        return None
    return full_text[idx:]


def fingerprint(tail: str) -> str:
    data = tail.encode("utf-8", "surrogatepass")
    return hashlib.blake2b(data, digest_size=16).hexdigest()


def _to_int(digits: str) -> Optional[int]:
    try:
        return int(digits)
    except ValueError:
        return None


def _is_menu_line(trimmed: str) -> bool:
    return trimmed.startswith("1. Yes") or "Yes, proceed" in trimmed


def _find_header(lines: List[str]) -> Tuple[Optional[re.Match[str]], int]:
    for i, line in enumerate(lines):
        m = HEADER_RE.match(line)
        if m is not None:
            return m, i + 1
    return None, len(lines)


def parse_edit_line(raw: str) -> Optional[LineEdit]:
    """
    Parse one numbered preview line:

        "    19 +    text"   -> ADD
        "    20 -    text"   -> DELETE
        "    21      text"   -> CONTEXT

    Returns None for lines that do not carry a line number and content.
    """
    no_indent = raw.lstrip()
    n = 0
    while n < len(no_indent) and "0" <= no_indent[n] <= "9":
        n += 1
    if n == 0:
        return None
    line_number = _to_int(no_indent[:n])
    if line_number is None:
        return None

    rest = no_indent[n:]
    if not rest:
        return None

    marker_idx = len(rest) - len(rest.lstrip())
    if marker_idx == len(rest):
        return None

    marker = rest[marker_idx]
    if marker == "+":
        kind = LineKind.ADD
    elif marker == "-":
        kind = LineKind.DELETE
    else:
        # Context keeps its leading whitespace: it is the source indentation.
        return LineEdit(line_number=line_number, kind=LineKind.CONTEXT, text=rest)

    text = rest[:marker_idx] + rest[marker_idx + 1 :]
    return LineEdit(line_number=line_number, kind=kind, text=text)


def parse_preview(full_text: str) -> Optional[PreviewBlock]:
    """
    Extract the most recent preview block from a terminal buffer.

    Expected shape:

      Would you like to make the following edits?

        path/to/File.kt (+A -D)

            18      }
            19 +    new line
            20 -    removed line
            21      context

      1. Yes, proceed

    Only the text after the last marker is considered. The menu line is
    optional so a buffer that is still streaming parses as far as it goes.
    Returns None when there is no marker, no header line or no edit lines.
    """
    tail = preview_tail(full_text)
    if tail is None:
        return None

    lines = LINE_SPLIT_RE.split(tail)
    header, idx = _find_header(lines)
    if header is None:
        return None

    edits: List[LineEdit] = []
    for raw in lines[idx:]:
        trimmed = raw.strip()
        if _is_menu_line(trimmed):
            break
        if not trimmed or trimmed == ELLIPSIS_MARK:
            continue
        edit = parse_edit_line(raw)
        if edit is not None:
            edits.append(edit)

    if not edits:
        return None

    return PreviewBlock(
        file_path=header.group(1).strip(),
        edits=tuple(edits),
        added=_to_int(header.group(2)),
        deleted=_to_int(header.group(3)),
    )
