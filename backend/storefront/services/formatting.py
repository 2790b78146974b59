"""
Boundary helpers between raw form input and the values the booking workflow
stores. The workflow keeps the normalized card number; grouping and masking
happen only when data leaves the core.
"""
from __future__ import annotations

import re
from typing import Any

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def normalize_card_number(value: str) -> str:
    return digits_only(value)


def format_card_number(value: str) -> str:
    """Group a card number into 4-digit blocks: '4242424242424242' -> '4242 4242 4242 4242'."""
    return _group(normalize_card_number(value))


def mask_card_number(value: str) -> str:
    digits = normalize_card_number(value)
    return _group("*" * max(len(digits) - 4, 0) + digits[-4:])


def _group(text: str) -> str:
    return " ".join(text[i : i + 4] for i in range(0, len(text), 4))


def format_expiry_date(value: str) -> str:
    """Render typed expiry digits as MM/YY; partial input is returned as typed."""
    digits = digits_only(value)
    if len(digits) >= 2:
        return f"{digits[:2]}/{digits[2:4]}"
    return digits


def parse_travelers(raw: Any) -> int:
    """
    Parse a travelers count arriving from a form or query string.
    Raises ValueError for anything that is not a whole number; clamping to
    at least one traveler is left to the workflow.
    """
    if isinstance(raw, bool):
        raise ValueError("Travelers must be a whole number")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError("Travelers must be a whole number")
        return int(raw)
    text = str(raw).strip()
    if not re.fullmatch(r"[+-]?\d+", text):
        raise ValueError("Travelers must be a whole number")
    return int(text)
