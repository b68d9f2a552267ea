"""Completions offered while the user types a date input."""

import logging
import re
from datetime import datetime
from typing import List, Optional

from memocal.grammars.base import TemporalGrammarAdapter
from memocal.normalize import normalize
from memocal.types import Suggestion

logger = logging.getLogger(__name__)

PRESETS = (
    Suggestion(label="今日 19:00", value="今日 19:00"),
    Suggestion(label="明日 10:00", value="明日 10:00"),
    Suggestion(label="今週末", value="今週末"),
)

# Partial kana input mapped to the relative day it is heading for.
KANA_COMPLETIONS = {
    "あ": "明日",
    "あした": "明日",
    "明日": "明日",
    "あさ": "明後日",
    "あさって": "明後日",
    "明後日": "明後日",
    "し": "明々後日",
    "しあさって": "明々後日",
    "明々後日": "明々後日",
}

_TRAILING_NUMBER = re.compile(r"^(.*?)([0-9]{1,2})$")


def format_resolved(value: datetime) -> str:
    return f"{value.month}月{value.day}日 {value:%H:%M}"


def _unit_completions(raw: str, prefix: str) -> List[Suggestion]:
    out: List[Suggestion] = []
    if not prefix.endswith("日"):
        out.append(Suggestion(label=f"{raw}日", value=f"{raw}日"))
    has_month_but_no_day = "月" in prefix and "日" not in prefix
    if not prefix.endswith("時") and not has_month_but_no_day:
        out.append(Suggestion(label=f"{raw}時", value=f"{raw}時"))
    if "月" not in prefix:
        out.append(Suggestion(label=f"{raw}月", value=f"{raw}月"))
    if "時" in prefix and "分" not in prefix:
        out.append(Suggestion(label=f"{raw}分", value=f"{raw}分"))
    return out


def suggest(
    raw: str,
    adapter: TemporalGrammarAdapter,
    now: Optional[datetime] = None,
) -> List[Suggestion]:
    """Build suggestions for the raw date input ``raw``."""
    if not raw.strip():
        return list(PRESETS)

    value = normalize(raw)
    suggestions: List[Suggestion] = []

    mentions = adapter.parse(value, now)
    if mentions:
        label = f"{format_resolved(mentions[0].resolved_start)} に設定"
        suggestions.append(Suggestion(label=label, value=raw, is_ai=True))

    match = _TRAILING_NUMBER.match(value)
    if match:
        suggestions.extend(_unit_completions(raw, match.group(1)))

    completion = KANA_COMPLETIONS.get(value)
    if completion and not any(s.value == completion for s in suggestions):
        suggestions.append(Suggestion(label=completion, value=completion))

    return suggestions
