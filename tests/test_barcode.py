import pytest

from zaiko_core.barcode import (
    BarcodeResult,
    Symbology,
    check_digit,
    classify,
    is_valid_barcode,
    next_internal_code,
)


def test_known_ean13_is_valid():
    result = classify("4006381333931")
    assert result == BarcodeResult(valid=True, symbology=Symbology.EAN13, normalized_code="4006381333931")


def test_known_upca_is_valid():
    result = classify("036000291452")
    assert result == BarcodeResult(valid=True, symbology=Symbology.UPCA, normalized_code="036000291452")


@pytest.mark.parametrize("code", ["5901234123457", "0036000291452"])
def test_more_ean13_codes(code):
    assert classify(code).symbology is Symbology.EAN13


def test_more_upca_codes():
    assert classify("012345678905").symbology is Symbology.UPCA


@pytest.mark.parametrize("code", ["4006381333931", "036000291452"])
def test_changing_check_digit_invalidates(code):
    for digit in "0123456789":
        if digit == code[-1]:
            continue
        result = classify(code[:-1] + digit)
        assert result == BarcodeResult(valid=False, symbology=None, normalized_code=None)


@pytest.mark.parametrize(
    "code",
    [
        "",
        "1",
        "12345678",
        "40063813339",  # 11 digits
        "40063813339311",  # 14 digits
        "400638133393a",
        " 4006381333931",
        "4006381333931 ",
        "4006-381333931",
        "０３６０００２９１４５２",  # full-width digits
        "٠٣٦٠٠٠٢٩١٤٥٢",  # Arabic-Indic digits
    ],
)
def test_wrong_length_or_characters_are_invalid(code):
    result = classify(code)
    assert not result.valid
    assert result.symbology is None
    assert result.normalized_code is None


@pytest.mark.parametrize("value", [None, 4006381333931, 36000291452.0, ["036000291452"], {"code": "x"}])
def test_non_string_input_is_invalid(value):
    assert classify(value) == BarcodeResult(valid=False)


def test_lengths_are_never_reinterpreted():
    # Valid as EAN-13 once the leading zero is added, but 12 digits means UPC-A only.
    assert classify("0036000291452").valid
    assert not classify("003600029145").valid


def test_classify_is_idempotent():
    first = classify("036000291452")
    assert classify(first.normalized_code) == first


def test_is_valid_barcode():
    assert is_valid_barcode("4006381333931")
    assert not is_valid_barcode("4006381333930")
    assert not is_valid_barcode(None)


def test_check_digit():
    assert check_digit("03600029145", Symbology.UPCA) == 2
    assert check_digit("400638133393", Symbology.EAN13) == 1
    assert check_digit("590123412345", Symbology.EAN13) == 7


@pytest.mark.parametrize(
    "payload, symbology",
    [
        ("0360002914", Symbology.UPCA),
        ("036000291452", Symbology.UPCA),
        ("40063813339", Symbology.EAN13),
        ("40063813339x", Symbology.EAN13),
    ],
)
def test_check_digit_rejects_bad_payload(payload, symbology):
    with pytest.raises(ValueError):
        check_digit(payload, symbology)


def test_next_internal_code_starts_at_zero():
    assert next_internal_code([]) == "ZAIKO-ITEM-0"
    assert next_internal_code([None, None]) == "ZAIKO-ITEM-0"


def test_next_internal_code_follows_highest_numeric_suffix():
    codes = ["ZAIKO-ITEM-3", None, "ZAIKO-ITEM-x", "ZAIKO-ITEM-10", "ZAIKO-ITEM-9"]
    assert next_internal_code(codes) == "ZAIKO-ITEM-11"
