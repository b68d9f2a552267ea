"""
spaCy extension management utilities.

Provides functions to safely register custom extensions on Span objects.
"""

from spacy.tokens import Span


def ensure_context_extension() -> None:
    """Ensure the context extension is registered on Span."""
    if not Span.has_extension("context"):
        Span.set_extension("context", default=None)


def ensure_identity_extension() -> None:
    """Ensure the dedup identity extension is registered on Span."""
    if not Span.has_extension("identity"):
        Span.set_extension("identity", default=None)
