from __future__ import annotations

from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file

from zaiko import db, log_message
from zaiko.exceptions import BarcodeNotAssignedError, InvalidRecordError
from zaiko.labels import LABEL_KINDS, render_png
from zaiko.storage import InventoryStore
from zaiko_core import classify

# blueprint router configuration
inventory = Blueprint("inventory", __name__, url_prefix="/api")

# JSON body keys accepted on item edits, mapped to InventoryStore arguments.
_ITEM_FIELDS = {
    "name": "name",
    "description": "description",
    "barcode": "barcode",
    "internalCode": "internal_code",
}


def store() -> InventoryStore:
    return InventoryStore(db.session)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidRecordError("Expected a JSON object body.")
    return body


@inventory.route("/inventory", methods=["GET"])
def list_inventory():
    return jsonify(store().load_inventory())


@inventory.route("/search", methods=["GET"])
def search():
    query = request.args.get("q", "")
    return jsonify(store().search(query))


@inventory.route("/low-stock", methods=["GET"])
def low_stock():
    return jsonify(store().low_stock())


@inventory.route("/barcode/<code>", methods=["GET"])
def barcode_feedback(code: str):
    """Live validity feedback while a barcode is typed."""
    result = classify(code)
    return jsonify(
        {
            "valid": result.valid,
            "symbology": result.symbology.value if result.symbology else None,
            "code": result.normalized_code,
        }
    )


@inventory.route("/internal-code/next", methods=["GET"])
def next_internal_code():
    return jsonify({"internalCode": store().next_internal_code()})


@inventory.route("/sets", methods=["POST"])
def create_set():
    body = _json_body()
    inventory_set = store().create_set(body.get("name"))
    current_app.logger.info(log_message(f"Created SET {inventory_set.name}"))
    return jsonify(inventory_set.to_dict()), 201


@inventory.route("/sets/<name>", methods=["PATCH"])
def rename_set(name: str):
    body = _json_body()
    inventory_set = store().rename_set(name, body.get("name"))
    current_app.logger.info(log_message(f"Renamed SET {name} to {inventory_set.name}"))
    return jsonify(inventory_set.to_dict())


@inventory.route("/sets/<name>", methods=["DELETE"])
def delete_set(name: str):
    store().delete_set(name)
    current_app.logger.info(log_message(f"Deleted SET {name}"))
    return "", 204


@inventory.route("/sets/<name>/items", methods=["POST"])
def create_item(name: str):
    body = _json_body()
    item = store().create_item(
        name,
        body.get("name"),
        stock=body.get("stock", 0),
        description=body.get("description"),
        barcode=body.get("barcode"),
        internal_code=body.get("internalCode"),
        generate_internal_code=bool(body.get("generateInternalCode")),
    )
    current_app.logger.info(log_message(f"Created ITEM {item.name} in SET {name}"))
    return jsonify(item.to_dict()), 201


@inventory.route("/sets/<name>/items/<item_id>", methods=["PATCH"])
def update_item(name: str, item_id: str):
    body = _json_body()
    changes = {arg: body[key] for key, arg in _ITEM_FIELDS.items() if key in body}
    item = store().update_item(name, item_id, **changes)
    current_app.logger.info(log_message(f"Updated ITEM {item_id} in SET {name}"))
    return jsonify(item.to_dict())


@inventory.route("/sets/<name>/items/<item_id>", methods=["DELETE"])
def delete_item(name: str, item_id: str):
    store().delete_item(name, item_id)
    current_app.logger.info(log_message(f"Deleted ITEM {item_id} from SET {name}"))
    return "", 204


@inventory.route("/sets/<name>/items/<item_id>/stock", methods=["POST"])
def adjust_stock(name: str, item_id: str):
    body = _json_body()
    action = body.get("action") or "overwrite"
    if isinstance(action, str):
        action = action.strip().lower()
    item = store().adjust_stock(name, item_id, body.get("amount"), action=action)
    current_app.logger.info(log_message(f"Stock {action} on ITEM {item_id}: now {item.stock}"))
    return jsonify(item.to_dict())


@inventory.route("/sets/<name>/items/<item_id>/barcode.png", methods=["GET"])
def barcode_png(name: str, item_id: str):
    """PNG of the item's internal code (Code 128) or retail barcode (EAN-13 / UPC-A)."""
    kind = (request.args.get("kind") or "internal").strip().lower()
    if kind not in LABEL_KINDS:
        raise InvalidRecordError(f"Unknown barcode kind {kind!r}; use 'internal' or 'retail'.")

    item = store().get_item(name, item_id)
    if kind == "internal":
        code, symbology = item.internal_code, None
    else:
        code, symbology = item.barcode, item.symbology
    if not code:
        raise BarcodeNotAssignedError(f"ITEM {item.name!r} has no {kind} barcode.")

    png = render_png(code, symbology)
    current_app.logger.info(log_message(f"Rendered {kind} barcode of ITEM {item_id}"))
    return send_file(BytesIO(png), mimetype="image/png", as_attachment=True, download_name=f"{item.name}.png")
