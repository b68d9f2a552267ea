"""Calendar file encoders."""

from .base import CalendarEncoder, export  # noqa: F401
from .ics import IcsEncoder  # noqa: F401
