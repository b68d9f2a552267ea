"""Utility functions for memocal."""

from .spans import filter_spans, overlaps, overlaps_any
from .extensions import ensure_context_extension, ensure_identity_extension

__all__ = [
    "filter_spans",
    "overlaps",
    "overlaps_any",
    "ensure_context_extension",
    "ensure_identity_extension",
]
