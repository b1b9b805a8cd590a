import pytest

from zaiko.labels import render_png

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.mark.parametrize(
    "code, symbology",
    [
        ("4006381333931", "EAN-13"),
        ("036000291452", "UPC-A"),
        ("ZAIKO-ITEM-7", None),
    ],
)
def test_render_png(code, symbology):
    assert render_png(code, symbology).startswith(PNG_SIGNATURE)


def test_internal_and_retail_renderings_differ():
    assert render_png("ZAIKO-ITEM-7") != render_png("4006381333931", "EAN-13")
