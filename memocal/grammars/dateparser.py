import logging
import re
from datetime import datetime
from typing import List, Optional

from dateparser.search import search_dates

from memocal.grammars.japanese import JapaneseDateRules
from memocal.registry import grammars
from memocal.types import GrammarMatch

logger = logging.getLogger(__name__)

# Bare numbers and runs of them are left for the ambiguous numeral detector.
_BARE_NUMBER = re.compile(r"[\s,，、・]*(?:[0-9]{1,2}[\s,，、・]*)+")
# A year on its own ("2024年の") is not a point in time.
_YEAR_ONLY = re.compile(r"\s*[0-9]{4}\s*年?\s*の?\s*")
# Hour readings left over once the rule layer has run are misparses.
_STRAY_HOUR = re.compile(r"[0-9]+\s*時")

MAX_YEAR_DRIFT = 10


def _mask(text: str, matches: List[GrammarMatch]) -> str:
    chars = list(text)
    for m in matches:
        chars[m.index:m.index + len(m.text)] = " " * len(m.text)
    return "".join(chars)


@grammars.register("dateparser")
class DateparserGrammar:
    """Temporal grammar backed by dateparser's free-text search.

    For Japanese locales the rule layer in ``japanese.py`` claims its
    expressions first; dateparser then searches the remaining text and its
    results are filtered for the misreadings it is prone to.
    """

    def __init__(self, prefer_dates_from: str = "current_period") -> None:
        self.prefer_dates_from = prefer_dates_from
        self.rules = JapaneseDateRules(prefer_dates_from)

    def _keep(self, substring: str, resolved: datetime, now: datetime, japanese: bool) -> bool:
        if _BARE_NUMBER.fullmatch(substring) or _YEAR_ONLY.fullmatch(substring):
            return False
        if japanese and _STRAY_HOUR.search(substring):
            return False
        if abs(resolved.year - now.year) > MAX_YEAR_DRIFT:
            logger.debug(f"Dropping implausible match {substring!r} -> {resolved}")
            return False
        return True

    def parse(
        self, text: str, locale: str, now: Optional[datetime] = None
    ) -> List[GrammarMatch]:
        now = now or datetime.now()
        japanese = locale.lower().startswith("ja")
        ruled = self.rules.parse(text, now) if japanese else []
        remaining = _mask(text, ruled)

        settings = {
            "RELATIVE_BASE": now,
            "PREFER_DATES_FROM": self.prefer_dates_from,
            "RETURN_AS_TIMEZONE_AWARE": False,
        }
        found = []
        if remaining.strip():
            found = search_dates(remaining, languages=[locale], settings=settings) or []

        matches: List[GrammarMatch] = list(ruled)
        cursor = 0
        for substring, resolved in found:
            if not self._keep(substring, resolved, now, japanese):
                continue
            index = remaining.find(substring, cursor)
            if index == -1:
                logger.debug(f"Dropping unlocatable match {substring!r}")
                continue
            cursor = index + len(substring)
            # Surrounding mask padding belongs to no expression.
            stripped = substring.strip()
            if not stripped:
                continue
            index += substring.index(stripped)
            matches.append(GrammarMatch(text=stripped, index=index, resolved_date=resolved))
        return sorted(matches, key=lambda m: m.index)
