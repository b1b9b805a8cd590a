"""Zaiko Inventory - Flask Application configuration."""

# Python imports
from os import environ, path

# Third-party imports
from dotenv import load_dotenv

# Local imports

# Load environment variables from .env file
basedir = path.abspath(path.dirname(__file__))
load_dotenv(path.join(basedir, ".env"))


class Config:
    """Base config."""

    SECRET_KEY = environ.get("SECRET_KEY")

    # Default persistence location for local dev.
    ZAIKO_FOLDER = environ.get("ZAIKO_FOLDER") or path.join(basedir, "zaiko_data")
    ZAIKO_DB_FILE_NAME = environ.get("ZAIKO_DB_FILE_NAME") or "zaiko.sqlite"
    ZAIKO_LOG_FILE = environ.get("ZAIKO_LOG_FILE") or path.join(ZAIKO_FOLDER, "zaiko.log")

    APP_SERVER_OS = environ.get("APP_SERVER_OS") or "Linux"

    # Imported JSON documents larger than this are refused outright.
    MAX_CONTENT_LENGTH = int(environ.get("ZAIKO_MAX_IMPORT_BYTES") or 5 * 1024 * 1024)

    EXPORT_FILE_NAME = "zaiko-inventory.json"


class ProdConfig(Config):
    """Production System Configuration"""

    FLASK_ENV = "production"
    DEBUG = False
    TESTING = False
    LOG_LINES_TO_SHOW = "164"


class DevConfig(Config):
    """Development System Configuration"""

    FLASK_ENV = "development"
    DEBUG = True
    TESTING = True
    LOG_LINES_TO_SHOW = "164"
