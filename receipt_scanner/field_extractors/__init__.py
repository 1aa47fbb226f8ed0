"""Field extraction helpers for structured receipt data."""
from .amount import extract_total
from .date import extract_date
from .merchant import extract_merchant
from .text import normalise

__all__ = ["extract_date", "extract_merchant", "extract_total", "normalise"]
