import os
import sys
import tempfile
from pathlib import Path

import pytest


# Ensure the project root (repo folder) is importable when running pytest under uv.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# The application is a global in zaiko/__init__.py and reads configuration
# from environment variables at import time, so the environment is set before
# the app fixture first imports it. Temp persistence keeps tests off the
# developer's data. zaiko_core imports nothing from zaiko.
_DATA_DIR = Path(tempfile.mkdtemp(prefix="zaiko-tests-"))

os.environ["APP_MODE"] = "config.DevConfig"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_SERVER_OS"] = "Linux"
os.environ["ZAIKO_FOLDER"] = str(_DATA_DIR)
os.environ["ZAIKO_DB_FILE_NAME"] = "test.sqlite"
os.environ["ZAIKO_LOG_FILE"] = str(_DATA_DIR / "test.log")
os.environ["ZAIKO_MAX_IMPORT_BYTES"] = str(64 * 1024)


EAN13 = "4006381333931"
UPCA = "036000291452"


@pytest.fixture(scope="session")
def app():
    import zaiko  # noqa: E402

    return zaiko.app


@pytest.fixture()
def db(app):
    """Fresh, empty schema for every test."""
    import zaiko  # noqa: E402

    with app.app_context():
        zaiko.db.drop_all()
        zaiko.db.create_all()
        yield zaiko.db
        zaiko.db.session.remove()


@pytest.fixture()
def client(app, db):
    return app.test_client()


@pytest.fixture()
def store(db):
    from zaiko.storage import InventoryStore

    return InventoryStore(db.session)


@pytest.fixture()
def stocked(store):
    """Two sets: Café (two items) and Tools (one item with a UPC-A barcode)."""
    store.create_set("Café")
    store.create_set("Tools")
    store.create_item("Café", "Espresso Beans", stock=12, description="Dark roast", barcode=EAN13)
    store.create_item("Café", "Milk", stock=3)
    store.create_item("Tools", "Hammer", stock=40, barcode=UPCA)
    return store
