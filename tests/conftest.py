"""Shared fixtures for memocal tests."""

import json
import os
import tempfile
from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Optional, Tuple

import pytest

from memocal.errors import SyncError
from memocal.registry import grammars
from memocal.types import EventCandidate, GrammarMatch, ParsedMention

NOW = datetime(2026, 10, 19, 9, 30, 15)
TOMORROW_10 = datetime(2026, 10, 20, 10, 0)


# ---------------------------------------------------------------------------
# Mock collaborators
# ---------------------------------------------------------------------------


class MockGrammar:
    """Grammar that recognizes a fixed vocabulary of phrases.

    Every occurrence of a known phrase becomes a match; longer phrases win
    when two would overlap.
    """

    def __init__(self, phrases: Optional[Dict[str, datetime]] = None):
        self.phrases = dict(phrases or {})
        self.calls: List[str] = []

    def parse(self, text: str, locale: str, now: Optional[datetime] = None) -> List[GrammarMatch]:
        self.calls.append(text)
        found: List[Tuple[int, str]] = []
        for phrase in sorted(self.phrases, key=len, reverse=True):
            start = text.find(phrase)
            while start != -1:
                end = start + len(phrase)
                if all(end <= s or start >= s + len(p) for s, p in found):
                    found.append((start, phrase))
                start = text.find(phrase, start + 1)
        return [
            GrammarMatch(text=phrase, index=start, resolved_date=self.phrases[phrase])
            for start, phrase in sorted(found)
        ]


class FailingGrammar:
    """Grammar that always faults."""

    def parse(self, text: str, locale: str, now: Optional[datetime] = None):
        raise RuntimeError("grammar exploded")


@grammars.register("fixture")
class FixtureGrammar(MockGrammar):
    """Registered grammar with a small fixed vocabulary, used by config-driven tests."""

    def __init__(self):
        super().__init__({"明日 10時": TOMORROW_10, "5/3": datetime(2027, 5, 3, 0, 0)})


class MockSyncService:
    """In-memory remote calendar recording every call."""

    def __init__(self, authenticated: bool = True, fail_on: Tuple[str, ...] = ()):
        self.authenticated = authenticated
        self.fail_on = fail_on
        self.created: List[EventCandidate] = []
        self.updated: List[Tuple[str, EventCandidate]] = []
        self.deleted: List[str] = []
        self.remote_events: List[EventCandidate] = []

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise SyncError(operation, "remote unavailable")

    def create(self, event: EventCandidate) -> str:
        self._check("create")
        self.created.append(event)
        return f"remote-{len(self.created)}"

    def update(self, remote_id: str, event: EventCandidate) -> None:
        self._check("update")
        self.updated.append((remote_id, event))

    def delete(self, remote_id: str) -> None:
        self._check("delete")
        self.deleted.append(remote_id)

    def list(self, time_min: datetime, time_max: datetime) -> List[EventCandidate]:
        self._check("list")
        return list(self.remote_events)


class FailingEncoder:
    """Encoder that always faults."""

    media_type = "text/calendar"
    suffix = ".ics"

    def encode(self, event: EventCandidate) -> str:
        raise ValueError("cannot encode")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_text() -> str:
    """Sample note mixing a resolvable mention and ambiguous numbers."""
    return "明日 10時 ミーティング\n15, 16 遠足\n2024年の旅行"


@pytest.fixture
def sample_phrases() -> Dict[str, datetime]:
    return {
        "明日 10時": TOMORROW_10,
        "5/3": datetime(2027, 5, 3, 0, 0),
        "2024年": datetime(2024, 1, 1, 0, 0),
    }


@pytest.fixture
def mock_grammar(sample_phrases: Dict[str, datetime]) -> MockGrammar:
    return MockGrammar(sample_phrases)


@pytest.fixture
def tomorrow_mention() -> ParsedMention:
    return ParsedMention(
        matched_text="明日 10時",
        start=0,
        end=6,
        resolved_start=TOMORROW_10,
    )


@pytest.fixture
def mock_sync() -> MockSyncService:
    return MockSyncService()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Temporary file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def temp_text_file(sample_text: str) -> Iterator[str]:
    """Create a temporary note file with sample content."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False, encoding="utf-8") as f:
        f.write(sample_text)
        path = f.name
    yield path
    os.unlink(path)


@pytest.fixture
def temp_output_dir() -> Iterator[str]:
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def minimal_config_dict(temp_output_dir: str) -> Dict:
    """Config dict wired to the fixture grammar."""
    return {
        "grammar": {"name": "fixture", "params": {}},
        "encoder": {"name": "ics", "params": {}},
        "loader": {"name": "text", "params": {}},
        "output_dir": temp_output_dir,
    }


@pytest.fixture
def temp_config_file(minimal_config_dict: Dict) -> Iterator[str]:
    """Temporary config JSON file for CLI testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(minimal_config_dict, f)
        path = f.name
    yield path
    os.unlink(path)


def in_one_hour(value: datetime) -> datetime:
    return value + timedelta(hours=1)
