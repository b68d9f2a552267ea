import hashlib
import logging
import re
from pathlib import Path
from typing import Protocol

from memocal.errors import EncodingError
from memocal.types import EventCandidate

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\s]+')


class CalendarEncoder(Protocol):
    """Encodes an event into a calendar interchange payload."""

    media_type: str
    suffix: str

    def encode(self, event: EventCandidate) -> str:
        ...


def export_filename(event: EventCandidate, suffix: str) -> str:
    """Title-based file name, made unique per candidate by a short id digest."""
    stem = _UNSAFE_FILENAME.sub("_", event.title).strip("_") or "event"
    digest = hashlib.sha256(event.id.encode("utf-8")).hexdigest()[:8]
    return f"{stem}-{digest}{suffix}"


def export(encoder: CalendarEncoder, event: EventCandidate, output_dir: str) -> Path:
    """Encode ``event`` and write the payload below ``output_dir``.

    Raises:
        EncodingError: if encoding or writing the file fails
    """
    try:
        payload = encoder.encode(event)
    except EncodingError:
        raise
    except Exception as exc:
        raise EncodingError(f"Could not encode '{event.title}': {exc}") from exc

    directory = Path(output_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / export_filename(event, encoder.suffix)
        path.write_text(payload, encoding="utf-8", newline="")
    except OSError as exc:
        raise EncodingError(f"Could not write calendar file: {exc}") from exc
    logger.info(f"Wrote calendar file {path}")
    return path
