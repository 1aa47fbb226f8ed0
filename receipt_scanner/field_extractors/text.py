"""Line normalisation shared by the field extractors."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple

LINE_BREAK_PATTERN = re.compile(r"\r?\n")

# A literal backslash-n token, so the joined view stays a single physical line.
JOIN_SEPARATOR = " \\n "


@dataclass(frozen=True)
class ReceiptText:
    lines: Tuple[str, ...]
    joined: str


def split_lines(raw_text: str) -> List[str]:
    stripped = (line.strip() for line in LINE_BREAK_PATTERN.split(raw_text or ""))
    return [line for line in stripped if line]


def join_lines(lines: Iterable[str]) -> str:
    return JOIN_SEPARATOR.join(lines)


def normalise(raw_text: str) -> ReceiptText:
    """Split ``raw_text`` into trimmed lines and build the joined view."""

    lines = split_lines(raw_text)
    return ReceiptText(lines=tuple(lines), joined=join_lines(lines))


__all__ = ["JOIN_SEPARATOR", "ReceiptText", "join_lines", "normalise", "split_lines"]
