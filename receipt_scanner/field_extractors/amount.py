"""Rule-based total extraction utilities.

Totals are located in two tiers.  Lines carrying a total-like keyword are
searched from the bottom of the receipt upwards and the first one yielding an
amount wins, preferring a currency-tagged amount over a bare one on that line.
Only when no keyword line yields an amount is the largest amount printed
anywhere on the receipt used instead.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

TOTAL_KEYWORDS: Tuple[str, ...] = (
    "grand total",
    "total amount",
    "amount due",
    "balance due",
    "total",
)

_AMOUNT = r"[0-9]{1,3}(?:,[0-9]{3})*(?:\.[0-9]{2})|[0-9]+\.[0-9]{2}"

CURRENCY_AMOUNT_PATTERN = re.compile(r"(?:\$|USD\s*\$?|EUR\s*€?|£|€)\s*(" + _AMOUNT + ")")
BARE_AMOUNT_PATTERN = re.compile(r"(?<![A-Za-z])(" + _AMOUNT + r")(?![A-Za-z])")
AMOUNT_PATTERN = re.compile(_AMOUNT)

_LEADING_NOISE = re.compile(r"^[^0-9$€£]+")


@dataclass(frozen=True)
class TotalMatch:
    value: str
    strategy: str
    line_index: int


def keyword_pattern(keywords: Tuple[str, ...]) -> Pattern[str]:
    alternatives = [r"\s*".join(re.escape(part) for part in keyword.split()) for keyword in keywords]
    return re.compile("(" + "|".join(alternatives) + ")", re.IGNORECASE)


def _parse_amount(text: str) -> Optional[float]:
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return None


def _keyword_total(lines: Sequence[str], keywords: Tuple[str, ...]) -> Optional[TotalMatch]:
    if not keywords:
        return None
    pattern = keyword_pattern(keywords)
    for index in range(len(lines) - 1, -1, -1):
        line = lines[index]
        if not pattern.search(line):
            continue
        match = CURRENCY_AMOUNT_PATTERN.search(line)
        if match:
            value = _LEADING_NOISE.sub("", match.group(0)).strip()
            return TotalMatch(value=value, strategy="currency", line_index=index)
        match = BARE_AMOUNT_PATTERN.search(line)
        if match:
            return TotalMatch(value=match.group(0), strategy="bare", line_index=index)
    return None


def _largest_amount(lines: Sequence[str]) -> Optional[TotalMatch]:
    best: Optional[TotalMatch] = None
    best_value = -1.0
    for index, line in enumerate(lines):
        for match in AMOUNT_PATTERN.finditer(line):
            value = _parse_amount(match.group(0))
            if value is not None and value > best_value:
                best_value = value
                best = TotalMatch(value=match.group(0), strategy="largest", line_index=index)
    if best_value > 0:
        return best
    return None


def find_total(lines: Sequence[str], keywords: Sequence[str] = TOTAL_KEYWORDS) -> Optional[TotalMatch]:
    """Locate the receipt total, returning the matched text and how it was found."""

    return _keyword_total(lines, tuple(keywords)) or _largest_amount(lines)


def extract_total(lines: Sequence[str]) -> str:
    found = find_total(lines)
    return found.value if found else ""


__all__ = [
    "AMOUNT_PATTERN",
    "BARE_AMOUNT_PATTERN",
    "CURRENCY_AMOUNT_PATTERN",
    "TOTAL_KEYWORDS",
    "TotalMatch",
    "extract_total",
    "find_total",
    "keyword_pattern",
]
