import logging
from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from memocal.errors import GrammarError
from memocal.types import GrammarMatch, ParsedMention

logger = logging.getLogger(__name__)


class TemporalGrammar(Protocol):
    """Finds date/time expressions in text.

    Matches come back in document order and never overlap.
    """

    def parse(
        self, text: str, locale: str, now: Optional[datetime] = None
    ) -> Sequence[GrammarMatch]:
        ...


class TemporalGrammarAdapter:
    """Wraps a grammar and converts its raw matches into ParsedMention records."""

    def __init__(self, grammar: TemporalGrammar, locale: str = "ja") -> None:
        self.grammar = grammar
        self.locale = locale

    def parse(self, text: str, now: Optional[datetime] = None) -> List[ParsedMention]:
        if not text.strip():
            return []
        try:
            matches = self.grammar.parse(text, self.locale, now)
        except GrammarError:
            raise
        except Exception as exc:
            raise GrammarError(f"Temporal grammar failed on input: {exc}") from exc

        mentions = [
            ParsedMention(
                matched_text=m.text,
                start=m.index,
                end=m.index + len(m.text),
                resolved_start=m.resolved_date,
                resolved_end=m.resolved_end_date,
            )
            for m in matches
        ]
        logger.debug(f"Grammar returned {len(mentions)} mentions ({len(text)} chars)")
        return mentions
