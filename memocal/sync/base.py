from datetime import datetime
from typing import List, Protocol

from memocal.types import EventCandidate


class CalendarSyncService(Protocol):
    """Remote calendar that accepted candidates are mirrored to.

    Every operation raises SyncError on failure.
    """

    @property
    def is_authenticated(self) -> bool:
        ...

    def create(self, event: EventCandidate) -> str:
        ...

    def update(self, remote_id: str, event: EventCandidate) -> None:
        ...

    def delete(self, remote_id: str) -> None:
        ...

    def list(self, time_min: datetime, time_max: datetime) -> List[EventCandidate]:
        ...
