"""Utility modules for the popup translator backend."""

from .text import safe_truncate

__all__ = ["safe_truncate"]
