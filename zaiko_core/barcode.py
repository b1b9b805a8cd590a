from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, Optional

INTERNAL_CODE_PREFIX = "ZAIKO-ITEM"

_DIGITS = frozenset("0123456789")


class Symbology(str, enum.Enum):
    EAN13 = "EAN-13"
    UPCA = "UPC-A"


# Total barcode length (check digit included) per symbology.
_LENGTHS = {12: Symbology.UPCA, 13: Symbology.EAN13}


@dataclass(frozen=True)
class BarcodeResult:
    valid: bool
    symbology: Optional[Symbology] = None
    normalized_code: Optional[str] = None


_INVALID = BarcodeResult(valid=False)


def _is_digit_string(value: Any) -> bool:
    # str.isdigit() also accepts superscripts and non-ASCII digits.
    return isinstance(value, str) and bool(value) and all(c in _DIGITS for c in value)


def check_digit(payload: str, symbology: Symbology) -> int:
    """Compute the check digit for a barcode payload (the code minus its last digit).

    UPC-A payloads are 11 digits and weight odd positions by 3.
    EAN-13 payloads are 12 digits and weight even positions by 3.
    """
    expected_len = 11 if symbology is Symbology.UPCA else 12
    if not _is_digit_string(payload) or len(payload) != expected_len:
        raise ValueError(f"{symbology.value} payload must be {expected_len} digits, got {payload!r}")

    digits = [int(c) for c in payload]
    odd_sum = sum(digits[0::2])  # positions 1, 3, 5, ...
    even_sum = sum(digits[1::2])  # positions 2, 4, 6, ...

    if symbology is Symbology.UPCA:
        total = odd_sum * 3 + even_sum
        return (10 - total % 10) % 10

    remainder = (odd_sum + even_sum * 3) % 10
    return 0 if remainder == 0 else 10 - remainder


def classify(code: Any) -> BarcodeResult:
    """Validate a retail barcode and report its symbology.

    Only 12-digit UPC-A and 13-digit EAN-13 codes are recognised; a code is
    never re-interpreted under the other symbology. Anything else, including
    non-string input, returns an invalid result instead of raising.
    """
    if not _is_digit_string(code):
        return _INVALID

    symbology = _LENGTHS.get(len(code))
    if symbology is None:
        return _INVALID

    if check_digit(code[:-1], symbology) != int(code[-1]):
        return _INVALID

    return BarcodeResult(valid=True, symbology=symbology, normalized_code=code)


def is_valid_barcode(code: Any) -> bool:
    return classify(code).valid


def next_internal_code(existing_codes: Iterable[Optional[str]]) -> str:
    """Return the next free ``ZAIKO-ITEM-<n>`` code after the highest one in use."""
    highest = -1
    for code in existing_codes:
        if not isinstance(code, str):
            continue
        parts = code.split("-")
        if len(parts) < 3 or not parts[2].isdecimal():
            continue
        highest = max(highest, int(parts[2]))
    return f"{INTERNAL_CODE_PREFIX}-{highest + 1}"
