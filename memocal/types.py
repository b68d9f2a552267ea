from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class Document:
    """Single note item."""

    id: Optional[str]
    text: str
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GrammarMatch:
    """Raw match returned by a temporal grammar."""

    text: str
    index: int
    resolved_date: datetime
    resolved_end_date: Optional[datetime] = None


@dataclass(frozen=True)
class ParsedMention:
    """Date/time mention recognized in normalized text."""

    matched_text: str
    start: int
    end: int
    resolved_start: datetime
    resolved_end: Optional[datetime] = None


@dataclass(frozen=True)
class AmbiguousNumeral:
    """Bare 1-2 digit number the grammar left unresolved."""

    digits: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.digits)

    @property
    def value(self) -> int:
        return int(self.digits)


@dataclass(frozen=True)
class AmbiguousGroup:
    """Run of ambiguous numerals joined only by light punctuation."""

    id: str
    members: Tuple[AmbiguousNumeral, ...]
    context_text: str


class DateField(str, Enum):
    """Calendar field an ambiguous numeral can be resolved to."""

    MONTH = "month"
    DAY = "day"
    HOUR = "hour"


class SyncTarget(str, Enum):
    """Where an accepted candidate is delivered."""

    GOOGLE = "google"
    FILE = "file"


@dataclass(frozen=True)
class EventCandidate:
    """Fully resolved event ready for encoding or remote sync."""

    id: str
    title: str
    source_text: str
    start: datetime
    end: datetime
    reminder_offsets: Tuple[timedelta, ...] = ()
    reminders: Tuple[str, ...] = ()
    raw_date: str = ""
    sync_target: SyncTarget = SyncTarget.FILE
    remote_id: Optional[str] = None


@dataclass
class ExtractionResult:
    """Filtered output of one extraction pass."""

    text: str
    mentions: List[ParsedMention] = field(default_factory=list)
    groups: List[AmbiguousGroup] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.mentions and not self.groups


@dataclass(frozen=True)
class Suggestion:
    """Completion offered for a partially typed date input."""

    label: str
    value: str
    is_ai: bool = False
