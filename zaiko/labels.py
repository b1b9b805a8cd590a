"""PNG images of an item's barcodes, for printing labels."""
from __future__ import annotations

from io import BytesIO
from typing import Optional

import barcode
from barcode.writer import ImageWriter

from zaiko_core import Symbology

# python-barcode names for the retail symbologies; internal codes use Code 128.
_BARCODE_CLASSES = {
    Symbology.EAN13.value: "ean13",
    Symbology.UPCA.value: "upca",
}

LABEL_KINDS = ("internal", "retail")


def render_png(code: str, symbology: Optional[str] = None) -> bytes:
    barcode_class = barcode.get_barcode_class(_BARCODE_CLASSES.get(symbology, "code128"))
    buffer = BytesIO()
    barcode_class(code, writer=ImageWriter()).write(buffer)
    return buffer.getvalue()
