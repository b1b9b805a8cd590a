"""
Validation and name normalisation for inventory records.

Every function here is a total predicate or transform over loosely typed
input (typically freshly parsed JSON or a database row turned into a dict).
Malformed input gives ``False`` / ``""``; nothing raises.

Two document layouts are accepted for a whole inventory:

- array layout: ``[{"name": ..., "items": [...]}, ...]``
- record layout: ``{"<set name>": {"id": ..., "items": [...]}, ...}``
"""
from __future__ import annotations

import math
import unicodedata
from collections.abc import Mapping
from typing import Any, Iterator, Optional, Tuple

from zaiko_core.barcode import INTERNAL_CODE_PREFIX, classify

# Categories with no visual representation: controls, format characters,
# surrogates, private use, unassigned, line/paragraph separators.
_INVISIBLE_CATEGORIES = frozenset({"Cc", "Cf", "Cs", "Co", "Cn", "Zl", "Zp"})

LAYOUT_ARRAY = "array"
LAYOUT_RECORD = "record"


def _is_visible(char: str) -> bool:
    return not char.isspace() and unicodedata.category(char) not in _INVISIBLE_CATEGORIES


def is_valid_text(value: Any) -> bool:
    """True for a string holding at least one visible, non-whitespace character."""
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    if not stripped:
        return False
    return any(_is_visible(c) for c in stripped)


def normalize_name(raw: Any) -> str:
    """Canonical comparison key for a set or item name.

    Trimmed, lower-cased and stripped of diacritics, so ``"Café"`` and
    ``"cafe"`` share a key. Returns ``""`` when ``raw`` is not valid text.
    """
    if not is_valid_text(raw):
        return ""
    decomposed = unicodedata.normalize("NFD", raw.strip().lower())
    folded = unicodedata.normalize(
        "NFC", "".join(c for c in decomposed if not unicodedata.combining(c))
    ).strip()
    # A name made only of accents folds down to nothing usable.
    return folded if is_valid_text(folded) else ""


def names_match(a: Any, b: Any) -> bool:
    key = normalize_name(a)
    return bool(key) and key == normalize_name(b)


def name_contains(haystack: Any, needle: Any) -> bool:
    """Substring search on canonical names."""
    key = normalize_name(needle)
    if not key:
        return False
    return key in normalize_name(haystack)


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but JSON true/false is not a stock count.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def _internal_code(candidate: Mapping) -> Any:
    if "internalCode" in candidate:
        return candidate["internalCode"]
    # Older exports used this key.
    return candidate.get("zaikode")


def is_valid_item(candidate: Any) -> bool:
    """Check a single item record.

    Negative stock is accepted here; the storage layer rejects it on edits.
    """
    if not isinstance(candidate, Mapping):
        return False
    if not is_valid_text(candidate.get("name")):
        return False
    if not _is_number(candidate.get("stock")):
        return False

    description = candidate.get("description")
    if description is not None and not isinstance(description, str):
        return False

    barcode = candidate.get("barcode")
    if barcode is not None and not classify(barcode).valid:
        return False

    internal_code = _internal_code(candidate)
    if internal_code is not None:
        if not is_valid_text(internal_code) or not internal_code.startswith(INTERNAL_CODE_PREFIX):
            return False

    return True


def is_valid_set(candidate: Any) -> bool:
    if not isinstance(candidate, Mapping):
        return False
    if not is_valid_text(candidate.get("name")):
        return False
    items = candidate.get("items")
    if not isinstance(items, list):
        return False
    return all(is_valid_item(item) for item in items)


def detect_layout(candidate: Any) -> Optional[str]:
    if isinstance(candidate, list):
        return LAYOUT_ARRAY
    if isinstance(candidate, Mapping):
        return LAYOUT_RECORD
    return None


def _raw_sets(candidate: Any) -> Iterator[Tuple[Any, Any]]:
    layout = detect_layout(candidate)
    if layout == LAYOUT_ARRAY:
        for entry in candidate:
            name = entry.get("name") if isinstance(entry, Mapping) else None
            yield name, entry
    elif layout == LAYOUT_RECORD:
        for name, entry in candidate.items():
            if isinstance(entry, Mapping):
                # The record key is the set name; it wins over any inner field.
                entry = {**entry, "name": name}
            yield name, entry


def is_valid_inventory(candidate: Any) -> bool:
    """Gate for an imported document: every set and item must be well formed.

    Only keys and shapes are checked here. Name uniqueness is up to the
    caller, which compares canonical names against what it stores.
    """
    if detect_layout(candidate) is None:
        return False
    return all(is_valid_text(name) and is_valid_set(entry) for name, entry in _raw_sets(candidate))


def iter_sets(candidate: Any) -> Iterator[Tuple[str, Mapping]]:
    """Yield ``(name, set)`` pairs of a document that passed ``is_valid_inventory``."""
    for name, entry in _raw_sets(candidate):
        yield name, entry
