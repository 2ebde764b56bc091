from __future__ import annotations

from pathlib import Path
from typing import Optional


def normalize_preview_path(raw: str) -> str:
    """
    Turn a path as printed in a preview header into a project-relative path.

    Drops VCS style "a/" / "b/" prefixes and a leading "./", and converts
    backslashes to forward slashes.
    """
    s = raw.removeprefix("a/").removeprefix("b/")
    if s.startswith("./"):
        s = s[2:]
    return s.replace("\\", "/")


def resolve_preview_path(raw: str, project_root: Optional[Path]) -> Path:
    normalized = normalize_preview_path(raw)
    if project_root is None:
        return Path(normalized)
    return project_root / normalized
