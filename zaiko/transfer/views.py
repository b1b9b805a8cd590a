from __future__ import annotations

import json

from flask import Blueprint, Response, current_app, jsonify, request

from zaiko import log_message
from zaiko.exceptions import InvalidImportError, SettingsError
from zaiko.inventory.views import store

# blueprint router configuration
transfer = Blueprint("transfer", __name__, url_prefix="/api")

_TRUTHY = {"1", "true", "yes", "on"}


@transfer.route("/export", methods=["GET"])
def export_json():
    """Download the whole inventory as a JSON document."""
    document = store().export_inventory()
    current_app.logger.info(log_message(f"Exported {len(document)} sets"))
    return Response(
        json.dumps(document, ensure_ascii=False, indent=2),
        mimetype="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{current_app.config["EXPORT_FILE_NAME"]}"'
        },
    )


@transfer.route("/import", methods=["POST"])
def import_json():
    """Replace the inventory with an uploaded JSON document.

    Without ``?confirm=1`` nothing is written; the response only reports how
    many sets and items would replace the current data.
    """
    try:
        document = json.loads(request.get_data(as_text=True))
    except (ValueError, RecursionError):
        raise InvalidImportError("The imported file is not JSON.") from None

    confirm = (request.args.get("confirm") or "").strip().lower() in _TRUTHY
    summary = store().import_inventory(document, confirm=confirm)
    if summary.applied:
        current_app.logger.warning(
            log_message(f"Import overwrote inventory with {summary.sets} sets / {summary.items} items")
        )
    return jsonify(summary.to_dict())


@transfer.route("/settings", methods=["GET"])
def get_settings():
    return jsonify(store().get_settings().to_dict())


@transfer.route("/settings", methods=["PUT"])
def save_settings():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise SettingsError("Expected a JSON object body.")
    settings = store().save_settings(**body)
    return jsonify(settings.to_dict())


@transfer.route("/reset", methods=["POST"])
def reset():
    store().reset()
    current_app.logger.warning(log_message("Inventory reset"))
    return jsonify(store().get_settings().to_dict())
