"""
Rule layer for Japanese absolute and day-relative expressions.

dateparser's free-text search misreads several common Japanese forms: a
bare ``10時`` becomes "ten hours from now", ``2024年の`` resolves to a
far-future year and ``5/3`` inside running text is often not found at all.
These rules resolve day words (今日, 明日, ...), ``[YYYY年]M月D日``,
``[YYYY/]M/D`` and clock times (``[午前|午後]H時[M分|半]``, ``H:MM``)
directly. A date immediately followed by a time merges into one match.

A date without a time is placed at noon and a time without a date falls
on the reference day. A date without a year takes the reference year
unless ``prefer_dates_from`` asks for the past or the future.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from memocal.types import GrammarMatch

logger = logging.getLogger(__name__)

IMPLIED_HOUR = 12

RELATIVE_DAYS = {
    "一昨日": -2,
    "おととい": -2,
    "昨日": -1,
    "きのう": -1,
    "今日": 0,
    "本日": 0,
    "きょう": 0,
    "明日": 1,
    "あした": 1,
    "明後日": 2,
    "あさって": 2,
    "明々後日": 3,
    "しあさって": 3,
}

_DAY_WORD = re.compile(
    "|".join(re.escape(w) for w in sorted(RELATIVE_DAYS, key=len, reverse=True))
)
_KANJI_DATE = re.compile(r"(?<![0-9])(?:([0-9]{4})年)?([0-9]{1,2})月([0-9]{1,2})日")
_SLASH_DATE = re.compile(r"(?<![0-9/])(?:([0-9]{4})/)?([0-9]{1,2})/([0-9]{1,2})(?![0-9/])")
_KANJI_TIME = re.compile(r"(午前|午後)?(?<![0-9])([0-9]{1,2})時(?!間)(?:([0-9]{1,2})分|(半))?")
_COLON_TIME = re.compile(r"(午前|午後)?(?<![0-9])([0-9]{1,2}):([0-9]{2})(?![0-9])")
_JOINER = re.compile(r"[ \t\u3000]*")


@dataclass
class _Token:
    start: int
    end: int
    day: Optional[date] = None
    clock: Optional[time] = None


def _shift_year(day: date, reference: date, prefer: str) -> date:
    if prefer == "future" and day < reference:
        return day.replace(year=day.year + 1)
    if prefer == "past" and day > reference:
        return day.replace(year=day.year - 1)
    return day


def _clock(meridiem: Optional[str], hour: int, minute: int) -> time:
    if meridiem == "午後" and hour < 12:
        hour += 12
    elif meridiem == "午前" and hour == 12:
        hour = 0
    return time(hour, minute)


class JapaneseDateRules:
    """Finds and resolves Japanese date and time expressions."""

    def __init__(self, prefer_dates_from: str = "current_period") -> None:
        self.prefer_dates_from = prefer_dates_from

    def _dates(self, text: str, reference: date) -> List[_Token]:
        tokens: List[_Token] = []
        for match in _DAY_WORD.finditer(text):
            day = reference + timedelta(days=RELATIVE_DAYS[match.group(0)])
            tokens.append(_Token(match.start(), match.end(), day=day))
        for pattern in (_KANJI_DATE, _SLASH_DATE):
            for match in pattern.finditer(text):
                year, month, day_of_month = match.groups()
                try:
                    day = date(int(year or reference.year), int(month), int(day_of_month))
                except ValueError:
                    logger.debug(f"Skipping impossible date {match.group(0)!r}")
                    continue
                if year is None:
                    day = _shift_year(day, reference, self.prefer_dates_from)
                tokens.append(_Token(match.start(), match.end(), day=day))
        return tokens

    def _times(self, text: str) -> List[_Token]:
        tokens: List[_Token] = []
        for match in _KANJI_TIME.finditer(text):
            meridiem, hour, minute, half = match.groups()
            value = 30 if half else int(minute or 0)
            try:
                clock = _clock(meridiem, int(hour), value)
            except ValueError:
                logger.debug(f"Skipping impossible time {match.group(0)!r}")
                continue
            tokens.append(_Token(match.start(), match.end(), clock=clock))
        for match in _COLON_TIME.finditer(text):
            meridiem, hour, minute = match.groups()
            try:
                clock = _clock(meridiem, int(hour), int(minute))
            except ValueError:
                continue
            tokens.append(_Token(match.start(), match.end(), clock=clock))
        return tokens

    def parse(self, text: str, now: datetime) -> List[GrammarMatch]:
        reference = now.date()
        tokens = self._dates(text, reference) + self._times(text)
        found = sorted(tokens, key=lambda t: (t.start, -t.end))

        merged: List[_Token] = []
        for token in found:
            if merged and token.start < merged[-1].end:
                continue
            previous = merged[-1] if merged else None
            if (
                previous is not None
                and previous.clock is None
                and token.day is None
                and _JOINER.fullmatch(text[previous.end:token.start])
            ):
                previous.end = token.end
                previous.clock = token.clock
                continue
            merged.append(token)

        matches: List[GrammarMatch] = []
        for token in merged:
            day = token.day or reference
            clock = token.clock if token.clock is not None else time(IMPLIED_HOUR)
            matches.append(
                GrammarMatch(
                    text=text[token.start:token.end],
                    index=token.start,
                    resolved_date=datetime.combine(day, clock),
                )
            )
        return matches
