# /zaiko/error_pages/handlers.py

# Third-party imports
from flask import Blueprint, jsonify, request


# Local imports
from zaiko import app, log_message
from zaiko.exceptions import ZaikoError

# blueprint router configuration
error_pages = Blueprint("error_pages", __name__)


@error_pages.app_errorhandler(ZaikoError)
def application_error(error):
    """Validation / lookup failures raised by the storage layer"""
    app.logger.info(log_message(f"{type(error).__name__}: {error}, URL: {request.path}"))
    return jsonify({"error": str(error)}), error.status_code


@error_pages.app_errorhandler(404)
def error_404(error):
    """Error 404 page handler"""
    incoming_url = request.path
    app.logger.error(log_message(f"404 Error: {error}, URL: {incoming_url}"))
    return jsonify({"error": "Not found"}), 404


@error_pages.app_errorhandler(413)
def error_413(error):
    """Oversized import upload"""
    app.logger.error(log_message(f"413 Error: {error}"))
    return jsonify({"error": "Upload too large"}), 413


@error_pages.app_errorhandler(500)
def error_500(error):
    """Error 500 page handler"""
    app.logger.error(log_message(error))
    return jsonify({"error": "Internal server error"}), 500
