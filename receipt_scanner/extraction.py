"""Compose the field extractors into a single receipt record."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Tuple

from .field_extractors import extract_date, extract_merchant, extract_total, normalise

EXPORT_FIELDS = ("date", "merchant", "total")


@dataclass(frozen=True)
class ExtractionResult:
    """Best-guess receipt fields; an empty string means the field was not found."""

    date: str = ""
    merchant: str = ""
    total: str = ""
    raw: str = ""

    @property
    def has_fields(self) -> bool:
        return any(self.as_row())

    def as_row(self) -> Tuple[str, str, str]:
        return self.date, self.merchant, self.total

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def extract(raw_text: str) -> ExtractionResult:
    """Extract date, merchant and total from OCR text.

    Never raises: text without recognisable fields produces empty strings.
    """

    text = normalise(raw_text)
    return ExtractionResult(
        date=extract_date(text.joined),
        merchant=extract_merchant(text.lines),
        total=extract_total(text.lines),
        raw=raw_text,
    )


__all__ = ["EXPORT_FIELDS", "ExtractionResult", "extract"]
