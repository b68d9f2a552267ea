"""
Session-scoped dedup ledger and the identity scheme it is keyed on.

An identity is a plain string built from what was matched and where. Two
passes over identical text produce identical identities, so membership in
the ledger is the only dedup check the pipeline performs.
"""

import logging
from typing import Iterator, Set

from memocal.types import AmbiguousGroup, AmbiguousNumeral, ParsedMention

logger = logging.getLogger(__name__)

MENTION_PREFIX = "mention"
NUMERAL_PREFIX = "numeral"
GROUP_PREFIX = "group"


def mention_identity(mention: ParsedMention) -> str:
    return f"{MENTION_PREFIX}:{mention.start}:{mention.matched_text}"


def numeral_key(numeral: AmbiguousNumeral) -> str:
    return f"{numeral.digits}@{numeral.offset}"


def numeral_identity(numeral: AmbiguousNumeral) -> str:
    return f"{NUMERAL_PREFIX}:{numeral_key(numeral)}"


def group_id(members) -> str:
    return "grp-" + "-".join(str(m.offset) for m in members)


def group_member_identity(group: AmbiguousGroup, numeral: AmbiguousNumeral) -> str:
    return f"{GROUP_PREFIX}:{group.id}:{numeral_key(numeral)}"


class DedupLedger:
    """Identities already accepted or dismissed during this editing session."""

    def __init__(self) -> None:
        self._entries: Set[str] = set()

    def __contains__(self, identity: str) -> bool:
        return identity in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def is_suppressed(self, identity: str) -> bool:
        return identity in self._entries

    def is_numeral_suppressed(self, numeral: AmbiguousNumeral) -> bool:
        """True when the numeral was resolved on its own or inside any group."""
        if numeral_identity(numeral) in self._entries:
            return True
        suffix = ":" + numeral_key(numeral)
        return any(
            e.startswith(GROUP_PREFIX + ":") and e.endswith(suffix) for e in self._entries
        )

    def record_accepted(self, identity: str) -> None:
        self._entries.add(identity)
        logger.debug(f"Ledger accepted {identity}")

    def record_dismissed(self, identity: str) -> None:
        self._entries.add(identity)
        logger.debug(f"Ledger dismissed {identity}")

    def record_removed(self, identity: str) -> None:
        self._entries.discard(identity)
        logger.debug(f"Ledger released {identity}")
