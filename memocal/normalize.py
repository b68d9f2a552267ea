"""
Input canonicalization applied before the temporal grammar runs.

Every rewrite is character-for-character so offsets computed on the
normalized text stay meaningful for the rest of the pipeline.
"""

import re

_FULLWIDTH_DIGITS = str.maketrans("０１２３４５６７８９", "0123456789")

# "4月3時" typed at the end of the input is read as "4月3日".
_MONTH_HOUR_TYPO = re.compile(r"([0-9]{1,2})月([0-9]{1,2})時\Z")


def to_halfwidth_digits(text: str) -> str:
    return text.translate(_FULLWIDTH_DIGITS)


def fix_month_hour_typo(text: str) -> str:
    return _MONTH_HOUR_TYPO.sub(r"\1月\2日", text)


def normalize(text: str) -> str:
    """Return the canonical form of raw input text."""
    return fix_month_hour_typo(to_halfwidth_digits(text))
