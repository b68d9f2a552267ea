"""Remote calendar sync services."""

from .base import CalendarSyncService  # noqa: F401
from .google import GoogleCalendarSync  # noqa: F401
