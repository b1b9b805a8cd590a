import math

import pytest

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

EAN13 = "4006381333931"
UPCA = "036000291452"


# ----------------------------
# is_valid_text
# ----------------------------

@pytest.mark.parametrize("value", [None, "", "   ", "\t\n ", 5, 3.2, {"a": 1}, ["Widget"], b"Widget"])
def test_invalid_text(value):
    assert not is_valid_text(value)


@pytest.mark.parametrize("value", ["\x00\x01", "\u200b\u200b", "\u2028", " \x7f ", "\u200e"])
def test_text_without_visible_characters_is_invalid(value):
    assert not is_valid_text(value)


@pytest.mark.parametrize("value", ["Widget", " x ", "在庫", "Café", "#1"])
def test_valid_text(value):
    assert is_valid_text(value)


# ----------------------------
# normalize_name
# ----------------------------

def test_accents_and_case_fold_together():
    assert normalize_name("Café") == normalize_name("cafe") == "cafe"
    # Decomposed input gives the same key as precomposed.
    assert normalize_name("Cafe\u0301") == "cafe"


def test_trims_but_keeps_inner_spacing():
    assert normalize_name("  Big  Box  ") == "big  box"


@pytest.mark.parametrize("value", [None, "", "   ", 12, "\x00"])
def test_invalid_names_have_no_canonical_form(value):
    assert normalize_name(value) == ""


@pytest.mark.parametrize(
    "value",
    ["Café", "  ÅNGSTRÖM ", "İstanbul", "\ufb01le", "\u00b4x", "Crème Brûlée", "在庫", "\u0301", "Ça\u200bva", "\u01c5emal"],
)
def test_normalize_is_idempotent(value):
    once = normalize_name(value)
    assert normalize_name(once) == once


def test_names_match():
    assert names_match("Crème Brûlée", "creme brulee")
    assert not names_match("Bolt", "Bolts")
    assert not names_match("", "")
    assert not names_match(None, None)


def test_name_contains():
    assert name_contains("Espresso Beans", "BEAN")
    assert name_contains("Café Supplies", "cafe")
    assert not name_contains("Espresso Beans", "milk")
    assert not name_contains("Espresso Beans", "   ")
    assert not name_contains(None, "bean")


# ----------------------------
# is_valid_item
# ----------------------------

def test_minimal_item():
    assert is_valid_item({"name": "Bolt", "stock": 5})


def test_negative_stock_is_accepted_by_the_validator():
    assert is_valid_item({"name": "Bolt", "stock": -1})


def test_zero_and_float_stock():
    assert is_valid_item({"name": "Bolt", "stock": 0})
    assert is_valid_item({"name": "Bolt", "stock": 2.5})
    # Far past float range; the range check belongs to the store.
    assert is_valid_item({"name": "Bolt", "stock": 10**400})


@pytest.mark.parametrize(
    "item",
    [
        {"name": "", "stock": 5},
        {"name": "   ", "stock": 5},
        {"stock": 5},
        {"name": "Bolt", "stock": math.nan},
        {"name": "Bolt"},
        {"name": "Bolt", "stock": None},
        {"name": "Bolt", "stock": "5"},
        {"name": "Bolt", "stock": True},
        {"name": "Bolt", "stock": 5, "description": 7},
        {"name": "Bolt", "stock": 5, "barcode": "4006381333930"},
        {"name": "Bolt", "stock": 5, "barcode": ""},
        {"name": "Bolt", "stock": 5, "internalCode": "ITEM-1"},
        {"name": "Bolt", "stock": 5, "internalCode": "   "},
        {"name": "Bolt", "stock": 5, "internalCode": 12},
        {"name": "Bolt", "stock": 5, "zaikode": "BAD-1"},
        {"name": ["Bolt"], "stock": 5},
    ],
)
def test_invalid_items(item):
    assert not is_valid_item(item)


@pytest.mark.parametrize("value", [None, "Bolt", 5, ["Bolt", 5], [("name", "Bolt")]])
def test_non_records_are_not_items(value):
    assert not is_valid_item(value)


def test_item_with_barcodes():
    assert is_valid_item({"name": "Bolt", "stock": 5, "barcode": EAN13})
    assert is_valid_item({"name": "Bolt", "stock": 5, "barcode": UPCA})


def test_item_optional_fields_may_be_null():
    assert is_valid_item(
        {"name": "Bolt", "stock": 5, "description": None, "barcode": None, "internalCode": None}
    )


def test_item_with_internal_code():
    assert is_valid_item({"name": "Bolt", "stock": 5, "internalCode": "ZAIKO-ITEM-4"})
    assert is_valid_item({"name": "Bolt", "stock": 5, "zaikode": "ZAIKO-ITEM-4"})


# ----------------------------
# is_valid_set / is_valid_inventory
# ----------------------------

def _tools():
    return {
        "name": "Tools",
        "items": [
            {"name": "Hammer", "stock": 4, "barcode": UPCA},
            {"name": "Saw", "stock": 1, "description": "Hand saw"},
        ],
    }


def _kitchen():
    return {
        "name": "Kitchen",
        "items": [
            {"name": "Espresso Beans", "stock": 12, "barcode": EAN13, "internalCode": "ZAIKO-ITEM-0"},
            {"name": "Milk", "stock": 3},
        ],
    }


def test_valid_set():
    assert is_valid_set(_tools())
    assert is_valid_set({"name": "Empty", "items": []})


@pytest.mark.parametrize(
    "candidate",
    [
        None,
        [],
        {"name": "Tools"},
        {"name": "Tools", "items": None},
        {"name": "Tools", "items": {"Hammer": {"stock": 1}}},
        {"name": "", "items": []},
        {"name": "Tools", "items": [{"name": "Hammer", "stock": math.nan}]},
    ],
)
def test_invalid_sets(candidate):
    assert not is_valid_set(candidate)


def test_two_well_formed_sets_are_a_valid_inventory():
    assert is_valid_inventory([_tools(), _kitchen()])


def test_one_bad_item_rejects_the_inventory():
    kitchen = _kitchen()
    kitchen["items"].append({"name": "Sugar", "stock": 1, "barcode": "4006381333930"})
    assert not is_valid_inventory([_tools(), kitchen])


def test_record_layout_is_accepted():
    document = {
        "Tools": {"id": "s1", "items": _tools()["items"]},
        "Kitchen": {"id": "s2", "items": _kitchen()["items"]},
    }
    assert is_valid_inventory(document)
    assert detect_layout(document) == "record"


def test_record_layout_key_must_be_valid_text():
    assert not is_valid_inventory({"   ": {"items": []}})
    assert not is_valid_inventory({"Tools": [{"name": "Hammer", "stock": 1}]})


def test_empty_inventories_are_valid():
    assert is_valid_inventory([])
    assert is_valid_inventory({})


@pytest.mark.parametrize("candidate", [None, "[]", 5, [None], [[]], [_tools(), "Kitchen"]])
def test_malformed_inventories(candidate):
    assert not is_valid_inventory(candidate)


def test_name_uniqueness_is_left_to_the_caller():
    # Shape only: duplicate names are the importer's problem, not the validator's.
    assert is_valid_inventory([{"name": "Café", "items": []}, {"name": " CAFE ", "items": []}])
    duplicated = {"name": "Tools", "items": [{"name": "Saw", "stock": 1}, {"name": "saw", "stock": 2}]}
    assert is_valid_inventory([duplicated])


def test_iter_sets_yields_names_for_both_layouts():
    assert [name for name, _ in iter_sets([_tools(), _kitchen()])] == ["Tools", "Kitchen"]
    record = {"Tools": {"items": []}}
    assert list(iter_sets(record)) == [("Tools", {"items": [], "name": "Tools"})]
