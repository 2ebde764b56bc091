from __future__ import annotations


class PreviewError(ValueError):
    """Base class for errors raised around preview handling (paths, config)."""


class PreviewPathError(PreviewError):
    """A preview path resolves outside the project root."""


class SettingsError(PreviewError):
    """A settings file could not be loaded or validated."""
