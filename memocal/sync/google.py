"""
Google Calendar v3 sync over plain REST.

The access token comes from the authentication collaborator (out of scope
here) through the constructor or the MEMOCAL_GOOGLE_TOKEN environment
variable. Without a token the service reports itself unauthenticated and
the session falls back to file export.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import requests

from memocal.encoders.ics import DESCRIPTION_TEMPLATE
from memocal.errors import SyncError
from memocal.registry import sync_services
from memocal.reminders import minutes_before
from memocal.types import EventCandidate, SyncTarget

logger = logging.getLogger(__name__)

API_ROOT = "https://www.googleapis.com/calendar/v3"
TOKEN_ENV = "MEMOCAL_GOOGLE_TOKEN"
UNTITLED = "予定なし"


def _parse_remote_time(value: Dict[str, str], tz: ZoneInfo) -> datetime:
    raw = value.get("dateTime") or value["date"]
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


@sync_services.register("google")
class GoogleCalendarSync:
    """Creates, updates, deletes and lists events on a Google calendar."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        calendar_id: str = "primary",
        time_zone: str = "Asia/Tokyo",
        timeout: float = 10.0,
        max_results: int = 100,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.access_token = access_token or os.getenv(TOKEN_ENV)
        self.calendar_id = calendar_id
        self.time_zone = time_zone
        self.timeout = timeout
        self.max_results = max_results
        self.session = session or requests.Session()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def events_url(self) -> str:
        return f"{API_ROOT}/calendars/{self.calendar_id}/events"

    def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> requests.Response:
        if not self.is_authenticated:
            raise SyncError(operation, "no access token")
        headers = {"Authorization": f"Bearer {self.access_token}"}
        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.Timeout as exc:
            raise SyncError(operation, f"timeout after {self.timeout}s") from exc
        except requests.exceptions.RequestException as exc:
            raise SyncError(operation, str(exc)) from exc
        if not response.ok:
            logger.error(f"Google Calendar {operation} returned {response.status_code}")
            raise SyncError(operation, f"HTTP {response.status_code}: {response.text[:200]}")
        return response

    def to_body(self, event: EventCandidate) -> Dict[str, Any]:
        return {
            "summary": event.title,
            "description": DESCRIPTION_TEMPLATE.format(raw_date=event.raw_date),
            "start": {"dateTime": event.start.isoformat(), "timeZone": self.time_zone},
            "end": {"dateTime": event.end.isoformat(), "timeZone": self.time_zone},
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "popup", "minutes": minutes_before(offset)}
                    for offset in event.reminder_offsets
                ],
            },
        }

    def from_item(self, item: Dict[str, Any]) -> EventCandidate:
        tz = ZoneInfo(self.time_zone)
        start = _parse_remote_time(item["start"], tz)
        end = _parse_remote_time(item.get("end", item["start"]), tz)
        return EventCandidate(
            id=item["id"],
            title=item.get("summary") or UNTITLED,
            source_text="",
            start=start,
            end=end,
            raw_date=f"{start.month}月{start.day}日 {start:%H:%M}",
            sync_target=SyncTarget.GOOGLE,
            remote_id=item["id"],
        )

    def create(self, event: EventCandidate) -> str:
        response = self._request("create", "POST", self.events_url, json=self.to_body(event))
        try:
            remote_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as exc:
            raise SyncError("create", f"malformed response: {exc!r}") from exc
        logger.info(f"Created Google Calendar event {remote_id}: {event.title}")
        return remote_id

    def update(self, remote_id: str, event: EventCandidate) -> None:
        self._request(
            "update", "PUT", f"{self.events_url}/{remote_id}", json=self.to_body(event)
        )
        logger.info(f"Updated Google Calendar event {remote_id}: {event.title}")

    def delete(self, remote_id: str) -> None:
        self._request("delete", "DELETE", f"{self.events_url}/{remote_id}")
        logger.info(f"Deleted Google Calendar event {remote_id}")

    def list(self, time_min: datetime, time_max: datetime) -> List[EventCandidate]:
        tz = ZoneInfo(self.time_zone)
        params = {
            "timeMin": time_min.replace(tzinfo=time_min.tzinfo or tz).isoformat(),
            "timeMax": time_max.replace(tzinfo=time_max.tzinfo or tz).isoformat(),
            "maxResults": self.max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        response = self._request("list", "GET", self.events_url, params=params)
        try:
            items = response.json().get("items", [])
            events = [self.from_item(item) for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise SyncError("list", f"malformed response: {exc!r}") from exc
        logger.info(f"Fetched {len(events)} Google Calendar events")
        return events
