"""
Event synthesis from accepted mentions and resolved ambiguous groups.
"""

import calendar
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from memocal.context import DEFAULT_TITLE, extract_title
from memocal.ledger import group_member_identity, mention_identity
from memocal.reminders import reminder_offsets
from memocal.types import (
    AmbiguousGroup,
    AmbiguousNumeral,
    DateField,
    EventCandidate,
    ParsedMention,
    SyncTarget,
)

logger = logging.getLogger(__name__)


def apply_field(now: datetime, field: DateField, value: int) -> datetime:
    """Overwrite a single calendar field of ``now``.

    Months keep the day of ``now``, clamped to the last day of the target
    month. Hours zero out minutes and seconds.

    Raises:
        ValueError: if ``value`` is out of range for ``field``
    """
    field = DateField(field)
    if field is DateField.MONTH:
        if not 1 <= value <= 12:
            raise ValueError(f"Month out of range: {value}")
        last_day = calendar.monthrange(now.year, value)[1]
        return now.replace(month=value, day=min(now.day, last_day))
    if field is DateField.DAY:
        return now.replace(day=value)
    return now.replace(hour=value, minute=0, second=0, microsecond=0)


class EventSynthesizer:
    """Builds EventCandidate records with a default duration and title."""

    def __init__(
        self,
        default_duration: timedelta = timedelta(hours=1),
        default_title: str = DEFAULT_TITLE,
    ) -> None:
        self.default_duration = default_duration
        self.default_title = default_title

    def from_mention(
        self,
        text: str,
        mention: ParsedMention,
        reminders: Iterable[str] = (),
        sync_target: SyncTarget = SyncTarget.FILE,
    ) -> EventCandidate:
        labels = tuple(reminders)
        start = mention.resolved_start
        end = mention.resolved_end or start + self.default_duration
        return EventCandidate(
            id=mention_identity(mention),
            title=extract_title(text, mention.matched_text, self.default_title),
            source_text=mention.matched_text,
            start=start,
            end=end,
            reminder_offsets=reminder_offsets(labels),
            reminders=labels,
            raw_date=mention.matched_text,
            sync_target=sync_target,
        )

    def from_group_member(
        self,
        text: str,
        group: AmbiguousGroup,
        numeral: AmbiguousNumeral,
        field: DateField,
        now: Optional[datetime] = None,
        sync_target: SyncTarget = SyncTarget.FILE,
    ) -> EventCandidate:
        """Resolve one member of ``group``.

        Raises:
            ValueError: if the numeral cannot denote ``field``
        """
        start = apply_field(now or datetime.now(), field, numeral.value)
        return EventCandidate(
            id=group_member_identity(group, numeral),
            title=extract_title(text, group.context_text, self.default_title),
            source_text=group.context_text,
            start=start,
            end=start + self.default_duration,
            raw_date=numeral.digits,
            sync_target=sync_target,
        )

    def from_group(
        self,
        text: str,
        group: AmbiguousGroup,
        field: DateField,
        now: Optional[datetime] = None,
        sync_target: SyncTarget = SyncTarget.FILE,
    ) -> List[EventCandidate]:
        """Resolve every member of ``group`` with the same field choice."""
        now = now or datetime.now()
        candidates: List[EventCandidate] = []
        for numeral in group.members:
            try:
                candidates.append(
                    self.from_group_member(text, group, numeral, field, now, sync_target)
                )
            except ValueError as exc:
                logger.warning(f"Skipping {numeral.digits} in {group.id}: {exc}")
        return candidates
