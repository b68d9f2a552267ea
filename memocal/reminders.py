"""Reminder vocabulary offered by the input form and its fixed offsets."""

from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Tuple

CUSTOM = "カスタム"

REMINDER_OFFSETS: Dict[str, Optional[timedelta]] = {
    "30分前": timedelta(minutes=30),
    "1時間": timedelta(hours=1),
    "3時間": timedelta(hours=3),
    "12時間": timedelta(hours=12),
    "1日": timedelta(days=1),
    "3日": timedelta(days=3),
    "1週間": timedelta(weeks=1),
    # Collected by the form but not turned into an offset yet.
    CUSTOM: None,
}

REMIND_OPTIONS: Tuple[str, ...] = tuple(REMINDER_OFFSETS)


def reminder_offsets(labels: Iterable[str]) -> Tuple[timedelta, ...]:
    """Map reminder labels to durations before the event start.

    Raises:
        ValueError: if a label is not part of the vocabulary
    """
    offsets: List[timedelta] = []
    for label in labels:
        if label not in REMINDER_OFFSETS:
            raise ValueError(f"Unknown reminder option: {label}")
        offset = REMINDER_OFFSETS[label]
        if offset is not None:
            offsets.append(offset)
    return tuple(offsets)


def minutes_before(offset: timedelta) -> int:
    return int(offset.total_seconds() // 60)
