"""Pure validation core: barcode checksums and inventory record checks.

Nothing in this package touches Flask, the database or the filesystem.
"""

from zaiko_core.barcode import (
    INTERNAL_CODE_PREFIX,
    BarcodeResult,
    Symbology,
    check_digit,
    classify,
    is_valid_barcode,
    next_internal_code,
)
from zaiko_core.validation import (
    detect_layout,
    is_valid_inventory,
    is_valid_item,
    is_valid_set,
    is_valid_text,
    iter_sets,
    name_contains,
    names_match,
    normalize_name,
)

__all__ = [
    "INTERNAL_CODE_PREFIX",
    "BarcodeResult",
    "Symbology",
    "check_digit",
    "classify",
    "is_valid_barcode",
    "next_internal_code",
    "detect_layout",
    "is_valid_inventory",
    "is_valid_item",
    "is_valid_set",
    "is_valid_text",
    "iter_sets",
    "name_contains",
    "names_match",
    "normalize_name",
]
