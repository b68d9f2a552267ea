"""Unit tests for the dedup ledger and identity scheme."""

from datetime import datetime

from memocal.ledger import (
    DedupLedger,
    group_id,
    group_member_identity,
    mention_identity,
    numeral_identity,
    numeral_key,
)
from memocal.types import AmbiguousGroup, AmbiguousNumeral, ParsedMention


def _group() -> AmbiguousGroup:
    members = (AmbiguousNumeral("15", 0), AmbiguousNumeral("16", 4))
    return AmbiguousGroup(id=group_id(members), members=members, context_text="15, 16")


class TestIdentities:
    """Tests for identity derivation."""

    def test_mention_identity_is_deterministic(self, tomorrow_mention):
        copy = ParsedMention(
            matched_text=tomorrow_mention.matched_text,
            start=tomorrow_mention.start,
            end=tomorrow_mention.end,
            resolved_start=datetime(1999, 1, 1),
        )
        assert mention_identity(tomorrow_mention) == mention_identity(copy)
        assert mention_identity(tomorrow_mention) == "mention:0:明日 10時"

    def test_mention_identity_depends_on_offset(self, tomorrow_mention):
        moved = ParsedMention("明日 10時", 3, 9, tomorrow_mention.resolved_start)
        assert mention_identity(moved) != mention_identity(tomorrow_mention)

    def test_numeral_identity(self):
        numeral = AmbiguousNumeral("7", 12)
        assert numeral_key(numeral) == "7@12"
        assert numeral_identity(numeral) == "numeral:7@12"

    def test_group_member_identities_differ(self):
        group = _group()
        first, second = (group_member_identity(group, m) for m in group.members)
        assert first == "group:grp-0-4:15@0"
        assert first != second


class TestDedupLedger:
    """Tests for DedupLedger state transitions."""

    def test_empty(self):
        ledger = DedupLedger()
        assert len(ledger) == 0
        assert not ledger.is_suppressed("mention:0:x")

    def test_accept_then_remove(self):
        ledger = DedupLedger()
        ledger.record_accepted("mention:0:x")
        assert "mention:0:x" in ledger
        assert ledger.is_suppressed("mention:0:x")
        ledger.record_removed("mention:0:x")
        assert not ledger.is_suppressed("mention:0:x")

    def test_dismissed_is_suppressed(self):
        ledger = DedupLedger()
        ledger.record_dismissed("mention:4:5/3")
        assert ledger.is_suppressed("mention:4:5/3")

    def test_remove_unknown_is_noop(self):
        ledger = DedupLedger()
        ledger.record_removed("missing")
        assert len(ledger) == 0

    def test_iteration_is_sorted(self):
        ledger = DedupLedger()
        for identity in ["b", "c", "a"]:
            ledger.record_accepted(identity)
        assert list(ledger) == ["a", "b", "c"]

    def test_group_member_suppresses_only_that_member(self):
        group = _group()
        ledger = DedupLedger()
        ledger.record_accepted(group_member_identity(group, group.members[0]))
        assert ledger.is_numeral_suppressed(group.members[0])
        assert not ledger.is_numeral_suppressed(group.members[1])

    def test_numeral_key_suffix_does_not_match_other_offsets(self):
        ledger = DedupLedger()
        ledger.record_accepted("group:grp-0-4:15@0")
        assert not ledger.is_numeral_suppressed(AmbiguousNumeral("5", 0))
        assert not ledger.is_numeral_suppressed(AmbiguousNumeral("15", 10))

    def test_standalone_numeral_suppression(self):
        numeral = AmbiguousNumeral("3", 2)
        ledger = DedupLedger()
        ledger.record_dismissed(numeral_identity(numeral))
        assert ledger.is_numeral_suppressed(numeral)
