"""
Span utilities shared by the detector and the spaCy component.
"""

from typing import Iterable, List, Tuple

from spacy.tokens import Span


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval intersection test."""
    return start < other_end and end > other_start


def overlaps_any(start: int, end: int, spans: Iterable[Tuple[int, int]]) -> bool:
    return any(overlaps(start, end, s, e) for s, e in spans)


def filter_spans(spans: List[Span]) -> List[Span]:
    """
    Filter overlapping spans, keeping the longest.

    Character offsets that expand to the same tokens can collide once
    aligned to a spaCy Doc; the longest span wins.

    Args:
        spans: List of spaCy Span objects

    Returns:
        Filtered list of non-overlapping spans, sorted by start position
    """
    if not spans:
        return []

    sorted_spans = sorted(spans, key=lambda s: (-(s.end - s.start), s.start))

    result = []
    seen_tokens = set()

    for span in sorted_spans:
        span_tokens = set(range(span.start, span.end))
        if not span_tokens & seen_tokens:
            result.append(span)
            seen_tokens.update(span_tokens)

    return sorted(result, key=lambda s: s.start)
