# /app.py

from zaiko import app, db
from zaiko.models import InventoryItem, InventorySet, Settings
from zaiko.storage import InventoryStore

@app.shell_context_processor
def make_shell_context():
    """Create a shell context for the application -
    for working with the Zaiko database in the Flask shell"""
    return {
        'db': db,
        'InventorySet': InventorySet,
        'InventoryItem': InventoryItem,
        'Settings': Settings,
        'store': InventoryStore(db.session),
    }
