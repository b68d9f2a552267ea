"""
Temporal mention extraction and event-candidate synthesis.

Scans free-form notes for date/time mentions and ambiguous bare numbers,
deduplicates them across re-parses and turns accepted matches into
calendar event candidates.
"""

__all__ = [
    "PipelineConfig",
    "ExtractionSession",
    "TemporalExtractor",
]

__version__ = "0.1.0"

from .config import PipelineConfig  # noqa: E402
from .pipeline import ExtractionSession, TemporalExtractor  # noqa: E402

# Import spacy_components to register factories with spaCy
from memocal import spacy_components  # noqa: F401, E402
