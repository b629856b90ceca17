"""Exception hierarchy shared by md_to_pdf modules."""

from __future__ import annotations

__all__ = ["ConfigError", "DependencyError"]


class ConfigError(ValueError):
    """Raised when configuration parsing or validation fails."""


class DependencyError(RuntimeError):
    """Raised when an optional runtime dependency is unavailable."""
