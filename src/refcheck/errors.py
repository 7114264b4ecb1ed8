"""Exceptions raised by refcheck."""

from __future__ import annotations


class RefcheckError(RuntimeError):
    """Raised when a verification run cannot be configured."""
