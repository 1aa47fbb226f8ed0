"""Date extraction helpers."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

_YEAR = r"(20\d{2}|19\d{2})"
_MONTH = r"(0?[1-9]|1[0-2])"
_DAY = r"(0?[1-9]|[12]\d|3[01])"
_SEP = r"[-/.]"
_NO_DIGIT_BEFORE = r"(?<!\d)"
_MONTH_NAME = r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[A-Za-z0-9_]*"


@dataclass(frozen=True)
class DatePattern:
    name: str
    regex: Pattern[str]


@dataclass(frozen=True)
class DateMatch:
    value: str
    pattern: str


# Ordered by priority: numeric shapes are ambiguous with each other, so the
# first pattern that matches anywhere in the text wins.
DATE_PATTERNS: Tuple[DatePattern, ...] = (
    DatePattern("iso", re.compile(_NO_DIGIT_BEFORE + _YEAR + _SEP + _MONTH + _SEP + _DAY)),
    DatePattern("mdy", re.compile(_NO_DIGIT_BEFORE + _MONTH + _SEP + _DAY + _SEP + _YEAR)),
    DatePattern("dmy", re.compile(_NO_DIGIT_BEFORE + _DAY + _SEP + _MONTH + _SEP + _YEAR)),
    DatePattern(
        "text_month",
        re.compile(_NO_DIGIT_BEFORE + _DAY + r"\s+" + _MONTH_NAME + r"\s+" + _YEAR, re.IGNORECASE),
    ),
)


def find_date(text: str, patterns: Sequence[DatePattern] = DATE_PATTERNS) -> Optional[DateMatch]:
    """Return the first match of the highest-priority pattern found in ``text``."""

    for pattern in patterns:
        match = pattern.regex.search(text)
        if match:
            return DateMatch(value=match.group(0), pattern=pattern.name)
    return None


def extract_date(text: str) -> str:
    found = find_date(text)
    return found.value if found else ""


__all__ = ["DATE_PATTERNS", "DateMatch", "DatePattern", "extract_date", "find_date"]
