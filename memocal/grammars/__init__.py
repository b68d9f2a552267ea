"""Temporal grammars."""

from .base import TemporalGrammar, TemporalGrammarAdapter  # noqa: F401
from .dateparser import DateparserGrammar  # noqa: F401
from .japanese import JapaneseDateRules  # noqa: F401
