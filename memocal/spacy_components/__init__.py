"""
spaCy components for memocal.

Import this module to register the ``memocal_temporal`` factory with spaCy.
"""

from . import temporal

__all__ = [
    "temporal",
]
