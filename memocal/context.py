"""
Title extraction from the text surrounding a mention.

The title is whatever remains of the line holding the mention once the
matched text and the particles or punctuation left dangling at its edges
are stripped. This is a best-effort heuristic; it never raises and falls
back to a default title.
"""
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "予定なし"

_PARTICLES = r"(?:から|まで|より|[はがをにでとのへもや]|[、。，．,.・:：!！?？\s])"
_LEADING = re.compile(rf"^{_PARTICLES}+")
_TRAILING = re.compile(rf"{_PARTICLES}+$")


def find_line(text: str, snippet: str) -> Optional[str]:
    """Return the first line of ``text`` containing ``snippet``."""
    if not snippet:
        return None
    for line in text.splitlines():
        if snippet in line:
            return line
    return None


def strip_particles(value: str) -> str:
    """Strip boundary particles and punctuation until nothing more matches."""
    previous = None
    while previous != value:
        previous = value
        value = _LEADING.sub("", value)
        value = _TRAILING.sub("", value)
    return value


def extract_title(text: str, source_text: str, default: str = DEFAULT_TITLE) -> str:
    """
    Derive an event title from the line containing ``source_text``.

    Args:
        text: Full normalized note text
        source_text: Matched mention text or a group's context text
        default: Title used when nothing meaningful remains

    Returns:
        The extracted title, or ``default``
    """
    try:
        line = find_line(text, source_text)
        if line is None:
            return default
        title = strip_particles(line.replace(source_text, "", 1))
    except Exception as exc:
        logger.warning(f"Title extraction failed for {source_text!r}: {exc}")
        return default
    return title or default
