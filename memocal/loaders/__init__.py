"""Note loaders."""

from .base import DocumentLoader  # noqa: F401
from .text import JSONLoader, JSONLLoader, TextLoader  # noqa: F401
