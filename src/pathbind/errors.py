"""Error hierarchy for controller resolution."""
from __future__ import annotations


class PathbindError(Exception):
    """Base for all pathbind errors."""


class ConfigurationError(PathbindError):
    """Required input missing or inconsistent (e.g. DETAIL without relations)."""


class ProgrammingError(PathbindError):
    """An unreachable branch was reached; the caller classified inputs wrongly."""
