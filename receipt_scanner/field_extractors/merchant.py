"""Merchant extraction from the receipt header."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

MERCHANT_HEADER_LINES = 12
MIN_ALPHA_RATIO = 0.3

MERCHANT_SKIP_KEYWORDS: Tuple[str, ...] = (
    "receipt",
    "invoice",
    "store",
    "market",
    "mart",
    "supermarket",
    "shop",
    "cashier",
    "transaction",
    "date",
    "time",
    "subtotal",
    "tax",
    "vat",
    "total",
    "amount",
    "phone",
    "tel",
    "address",
    "pos",
    "terminal",
    "card",
    "change",
    "cash",
    "credit",
    "debit",
)

_ALPHA = re.compile(r"[A-Za-z]")
_DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9 .,&'-]")
_REPEATED_SPACE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class MerchantMatch:
    value: str
    line_index: int


def skip_pattern(keywords: Sequence[str]) -> Pattern[str]:
    return re.compile("(" + "|".join(re.escape(keyword) for keyword in keywords) + ")", re.IGNORECASE)


def _alpha_ratio(line: str) -> float:
    if not line:
        return 0.0
    return len(_ALPHA.findall(line)) / len(line)


def sanitise(line: str) -> str:
    cleaned = _DISALLOWED_CHARS.sub("", line)
    return _REPEATED_SPACE.sub(" ", cleaned).strip()


def find_merchant(
    lines: Sequence[str],
    skip_keywords: Sequence[str] = MERCHANT_SKIP_KEYWORDS,
    max_lines: int = MERCHANT_HEADER_LINES,
) -> Optional[MerchantMatch]:
    """Return the first header line that reads like a business name.

    Only the first ``max_lines`` lines are considered.  Lines dominated by
    digits or punctuation, lines mentioning receipt boilerplate and one-character
    fragments are skipped; the first survivor wins even if a better looking
    name appears further down.
    """

    skip = skip_pattern(skip_keywords) if skip_keywords else None
    for index, line in enumerate(lines[:max_lines]):
        if _alpha_ratio(line) < MIN_ALPHA_RATIO:
            continue
        if skip is not None and skip.search(line):
            continue
        if len(line) < 2:
            continue
        value = sanitise(line)
        if value:
            return MerchantMatch(value=value, line_index=index)
    return None


def extract_merchant(lines: Sequence[str]) -> str:
    found = find_merchant(lines)
    return found.value if found else ""


__all__ = [
    "MERCHANT_HEADER_LINES",
    "MERCHANT_SKIP_KEYWORDS",
    "MerchantMatch",
    "extract_merchant",
    "find_merchant",
    "sanitise",
    "skip_pattern",
]
