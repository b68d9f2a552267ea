"""
Ambiguous numeral detection and adjacency grouping.

A bare 1-2 digit number the grammar did not claim is ambiguous: it might be
a month, a day or an hour. Numbers separated only by light punctuation are
grouped so the user disambiguates them together.

The separator contract: the gap between two grouped numerals may contain
only whitespace, commas (ASCII, full-width or ideographic), middle dots,
ampersands, periods and the connectors "and" / "と", in any mixture. Any
other character in the gap closes the group.
"""

import re
from typing import List, Optional, Sequence

from memocal.ledger import DedupLedger, group_id
from memocal.types import AmbiguousGroup, AmbiguousNumeral, ParsedMention
from memocal.utils.spans import overlaps_any

NUMERAL_PATTERN = re.compile(r"(?<![0-9])[0-9]{1,2}(?![0-9])")

SEPARATOR_PATTERN = re.compile(r"(?:[\s,，、・･&＆.．]|and|と)*", re.IGNORECASE)


def is_separator_gap(gap: str) -> bool:
    """True when ``gap`` may sit between two members of one group."""
    return SEPARATOR_PATTERN.fullmatch(gap) is not None


def detect_ambiguous_numerals(
    text: str,
    mentions: Sequence[ParsedMention],
    ledger: Optional[DedupLedger] = None,
) -> List[AmbiguousNumeral]:
    """Find bare numerals outside every mention span, in document order."""
    spans = [(m.start, m.end) for m in mentions]
    numerals: List[AmbiguousNumeral] = []
    for match in NUMERAL_PATTERN.finditer(text):
        if overlaps_any(match.start(), match.end(), spans):
            continue
        numeral = AmbiguousNumeral(digits=match.group(0), offset=match.start())
        if ledger is not None and ledger.is_numeral_suppressed(numeral):
            continue
        numerals.append(numeral)
    return numerals


def _close(text: str, members: List[AmbiguousNumeral]) -> AmbiguousGroup:
    return AmbiguousGroup(
        id=group_id(members),
        members=tuple(members),
        context_text=text[members[0].offset:members[-1].end],
    )


def group_adjacent(text: str, numerals: Sequence[AmbiguousNumeral]) -> List[AmbiguousGroup]:
    """Greedily merge numerals whose gaps satisfy the separator contract."""
    groups: List[AmbiguousGroup] = []
    current: List[AmbiguousNumeral] = []
    for numeral in sorted(numerals, key=lambda n: n.offset):
        if current and is_separator_gap(text[current[-1].end:numeral.offset]):
            current.append(numeral)
            continue
        if current:
            groups.append(_close(text, current))
        current = [numeral]
    if current:
        groups.append(_close(text, current))
    return groups
