"""
InventoryStore: persistence of sets, items and settings.

The store is built around an explicit SQLAlchemy session; the views create
one per request. Every name lookup goes through ``normalize_name`` and every
record is checked with the pure validators in ``zaiko_core`` before it is
written.
"""
from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from zaiko_core import (
    classify,
    is_valid_inventory,
    is_valid_item,
    is_valid_text,
    iter_sets,
    name_contains,
    next_internal_code,
    normalize_name,
)
from zaiko.exceptions import (
    DuplicateNameError,
    InvalidImportError,
    InvalidRecordError,
    InvalidStockError,
    ItemNotFoundError,
    SetNotFoundError,
    SettingsError,
)
from zaiko.models import InventoryItem, InventorySet, Settings, Theme

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 255

# Largest value SQLite stores in an INTEGER column.
MAX_STOCK = 2**63 - 1

STOCK_ACTIONS = ("overwrite", "increment", "decrement")

DEFAULT_SETTINGS = {
    "app_name": "Zaiko",
    "theme": Theme.light,
    "warn_threshold": 20,
    "critical_threshold": 5,
}

# Lets update_item tell "clear this field" (None) from "leave it alone".
_UNSET: Any = object()


@dataclass(frozen=True)
class ImportSummary:
    sets: int
    items: int
    applied: bool

    def to_dict(self) -> dict[str, Any]:
        return {"sets": self.sets, "items": self.items, "applied": self.applied}


def _is_stock_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_STOCK


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_description(description: Any) -> Optional[str]:
    if _is_blank(description):
        return None
    if not is_valid_text(description):
        raise InvalidRecordError(f"Description {description!r} is NOT valid.")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidRecordError(f"Description is longer than {MAX_DESCRIPTION_LENGTH} characters.")
    return description


def _clean_barcode(barcode: Any) -> tuple[Optional[str], Optional[str]]:
    """Return (code, symbology) for a barcode field; blanks clear it."""
    if _is_blank(barcode):
        return None, None
    result = classify(barcode.strip() if isinstance(barcode, str) else barcode)
    if not result.valid:
        raise InvalidRecordError(f"Barcode {barcode!r} is NOT a valid EAN-13 or UPC-A code.")
    return result.normalized_code, result.symbology.value


def _clean_name(name: Any) -> tuple[str, str]:
    key = normalize_name(name)
    if not key:
        raise InvalidRecordError(f"Name {name!r} is NOT valid.")
    return name.strip(), key


def _imported_stock(name: str, stock: Any) -> int:
    # The validator lets negative and fractional counts through; the column does not.
    clean = max(0, int(stock))
    if clean != stock:
        logger.warning("Imported item %r had stock %r, stored as %s", name, stock, clean)
    return clean


def _check_importable(sets: list[tuple[str, Any]]) -> None:
    """Refuse a well-formed document the database would still reject."""
    set_keys: set[str] = set()
    internal_codes: set[str] = set()
    for name, entry in sets:
        key = normalize_name(name)
        if not key:
            raise InvalidImportError(f"SET name {name!r} has no visible characters.")
        if key in set_keys:
            raise InvalidImportError(f"SET {name!r} appears more than once.")
        set_keys.add(key)

        item_keys: set[str] = set()
        for record in entry["items"]:
            item_name, stock = record["name"], record["stock"]
            item_key = normalize_name(item_name)
            if not item_key:
                raise InvalidImportError(f"ITEM name {item_name!r} in SET {name!r} has no visible characters.")
            if item_key in item_keys:
                raise InvalidImportError(f"ITEM {item_name!r} appears more than once in SET {name!r}.")
            item_keys.add(item_key)

            if (isinstance(stock, float) and not math.isfinite(stock)) or stock > MAX_STOCK:
                raise InvalidImportError(f"ITEM {item_name!r} has an impossible stock of {stock!r}.")

            code = record.get("internalCode", record.get("zaikode"))
            if not _is_blank(code):
                if code.strip() in internal_codes:
                    raise InvalidImportError(f"Internal code {code!r} appears more than once.")
                internal_codes.add(code.strip())


class InventoryStore:
    """Sets, items and settings on top of one SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _writing(self) -> Iterator[None]:
        """Commit on success; roll back on any error so the session stays usable."""
        try:
            yield
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning("Integrity error, rolled back: %s", e.orig)
            if "UNIQUE" in str(e.orig):
                raise DuplicateNameError("A record with that name or code already exists.") from e
            raise InvalidRecordError("The record breaks a database constraint.") from e
        except Exception:
            self.session.rollback()
            raise

    # ----------------------------
    # Reading
    # ----------------------------

    def _sets(self) -> list[InventorySet]:
        return list(self.session.scalars(select(InventorySet).order_by(InventorySet.created_at, InventorySet.name_key)))

    def _find_set(self, key: str) -> Optional[InventorySet]:
        if not key:
            return None
        return self.session.scalars(select(InventorySet).where(InventorySet.name_key == key)).first()

    def get_set(self, name: Any) -> InventorySet:
        found = self._find_set(normalize_name(name))
        if found is None:
            raise SetNotFoundError(f"SET {name!r} does not exist.")
        return found

    def get_item(self, set_name: Any, item_id: str) -> InventoryItem:
        inventory_set = self.get_set(set_name)
        for item in inventory_set.items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(f"ITEM {item_id!r} is not in SET {inventory_set.name!r}.")

    def load_inventory(self) -> list[dict[str, Any]]:
        """All sets in array layout. Stored rows that fail validation are skipped."""
        inventory = []
        for inventory_set in self._sets():
            items = []
            for item in inventory_set.items:
                record = item.to_dict()
                if not is_valid_item(record):
                    logger.warning(
                        "Skipping invalid item %s in set %s loaded from the database",
                        item.id,
                        inventory_set.id,
                    )
                    continue
                items.append(record)
            inventory.append({"id": inventory_set.id, "name": inventory_set.name, "items": items})
        return inventory

    def export_inventory(self) -> list[dict[str, Any]]:
        return self.load_inventory()

    def search(self, query: Any) -> list[dict[str, Any]]:
        """Sets matching ``query`` whole, otherwise only their matching items."""
        if not normalize_name(query):
            return []
        raw = query.strip()
        results = []
        for entry in self.load_inventory():
            if name_contains(entry["name"], query):
                results.append(entry)
                continue
            items = [
                item
                for item in entry["items"]
                if name_contains(item["name"], query)
                or name_contains(item["description"], query)
                or (item["barcode"] and raw in item["barcode"])
                or (item["internalCode"] and raw.upper() in item["internalCode"])
            ]
            if items:
                results.append({**entry, "items": items})
        return results

    def low_stock(self, settings: Optional[Settings] = None) -> list[dict[str, Any]]:
        """Items at or below the warning threshold, lowest stock first."""
        settings = settings or self.get_settings()
        flagged = []
        for entry in self.load_inventory():
            for item in entry["items"]:
                if item["stock"] > settings.warn_threshold:
                    continue
                level = "critical" if item["stock"] <= settings.critical_threshold else "warning"
                flagged.append({**item, "set": entry["name"], "level": level})
        flagged.sort(key=lambda i: i["stock"])
        return flagged

    # ----------------------------
    # Sets
    # ----------------------------

    def _require_free_set_name(self, key: str, name: Any, ignore: Optional[InventorySet] = None) -> None:
        clash = self._find_set(key)
        if clash is not None and clash is not ignore:
            raise DuplicateNameError(f"SET {name!r} already exists.")

    def create_set(self, name: Any) -> InventorySet:
        display, key = _clean_name(name)
        self._require_free_set_name(key, name)
        inventory_set = InventorySet(name=display, name_key=key)
        with self._writing():
            self.session.add(inventory_set)
        logger.info("Created set %s (%s)", inventory_set.name, inventory_set.id)
        return inventory_set

    def rename_set(self, name: Any, new_name: Any) -> InventorySet:
        inventory_set = self.get_set(name)
        display, key = _clean_name(new_name)
        self._require_free_set_name(key, new_name, ignore=inventory_set)
        with self._writing():
            inventory_set.name = display
            inventory_set.name_key = key
        logger.info("Renamed set %s to %s", inventory_set.id, inventory_set.name)
        return inventory_set

    def delete_set(self, name: Any) -> None:
        inventory_set = self.get_set(name)
        set_id, display = inventory_set.id, inventory_set.name
        with self._writing():
            self.session.delete(inventory_set)
        logger.info("Deleted set %s (%s)", display, set_id)

    # ----------------------------
    # Items
    # ----------------------------

    @staticmethod
    def _require_free_item_name(
        inventory_set: InventorySet, key: str, name: Any, ignore: Optional[InventoryItem] = None
    ) -> None:
        for item in inventory_set.items:
            if item.name_key == key and item is not ignore:
                raise DuplicateNameError(f"ITEM {name!r} already exists in SET {inventory_set.name!r}.")

    def _clean_internal_code(self, code: Any, ignore: Optional[InventoryItem] = None) -> Optional[str]:
        if _is_blank(code):
            return None
        code = code.strip() if isinstance(code, str) else code
        # Same rule the importer applies.
        if not is_valid_item({"name": "-", "stock": 0, "internalCode": code}):
            raise InvalidRecordError(f"Internal code {code!r} is NOT valid.")
        with self.session.no_autoflush:
            clash = self.session.scalars(
                select(InventoryItem).where(InventoryItem.internal_code == code)
            ).first()
        if clash is not None and clash is not ignore:
            raise DuplicateNameError(f"Internal code {code!r} is already assigned.")
        return code

    def next_internal_code(self) -> str:
        return next_internal_code(self.session.scalars(select(InventoryItem.internal_code)))

    def create_item(
        self,
        set_name: Any,
        name: Any,
        stock: Any = 0,
        description: Any = None,
        barcode: Any = None,
        internal_code: Any = None,
        generate_internal_code: bool = False,
    ) -> InventoryItem:
        inventory_set = self.get_set(set_name)
        display, key = _clean_name(name)
        self._require_free_item_name(inventory_set, key, name)

        if not _is_stock_count(stock):
            raise InvalidStockError(f"Stock {stock!r} is invalid or lower than 0.")

        description = _clean_description(description)
        barcode, symbology = _clean_barcode(barcode)
        if generate_internal_code and _is_blank(internal_code):
            internal_code = self.next_internal_code()
        internal_code = self._clean_internal_code(internal_code)

        record = {
            "name": display,
            "description": description,
            "stock": stock,
            "barcode": barcode,
            "internalCode": internal_code,
        }
        if not is_valid_item(record):
            raise InvalidRecordError(f"ITEM {name!r} is NOT valid.")

        with self._writing():
            item = InventoryItem(
                name_key=key,
                symbology=symbology,
                position=len(inventory_set.items),
                name=display,
                description=description,
                stock=stock,
                barcode=barcode,
                internal_code=internal_code,
            )
            inventory_set.items.append(item)
        logger.info("Created item %s (%s) in set %s", item.name, item.id, inventory_set.name)
        return item

    def update_item(
        self,
        set_name: Any,
        item_id: str,
        name: Any = _UNSET,
        description: Any = _UNSET,
        barcode: Any = _UNSET,
        internal_code: Any = _UNSET,
    ) -> InventoryItem:
        """Edit an item's identity fields. Stock goes through adjust_stock."""
        item = self.get_item(set_name, item_id)
        changes: dict[str, Any] = {}

        if name is not _UNSET:
            changes["name"], changes["name_key"] = _clean_name(name)
            self._require_free_item_name(item.inventory_set, changes["name_key"], name, ignore=item)
        if description is not _UNSET:
            changes["description"] = _clean_description(description)
        if barcode is not _UNSET:
            changes["barcode"], changes["symbology"] = _clean_barcode(barcode)
        if internal_code is not _UNSET:
            changes["internal_code"] = self._clean_internal_code(internal_code, ignore=item)

        with self._writing():
            for field, value in changes.items():
                setattr(item, field, value)
        logger.info("Updated item %s in set %s: %s", item.id, item.inventory_set.name, sorted(changes))
        return item

    def adjust_stock(self, set_name: Any, item_id: str, amount: Any, action: str = "overwrite") -> InventoryItem:
        if action not in STOCK_ACTIONS:
            raise InvalidStockError(f"Unknown stock action {action!r}.")
        if not _is_stock_count(amount):
            raise InvalidStockError(f"Stock {amount!r} is invalid or lower than 0.")

        item = self.get_item(set_name, item_id)
        if action == "overwrite":
            new_stock = amount
        elif action == "increment":
            new_stock = item.stock + amount
        else:
            new_stock = item.stock - amount

        if new_stock > MAX_STOCK:
            raise InvalidStockError(f"Stock of {item.name!r} cannot go above {MAX_STOCK}.")
        if new_stock < 0:
            raise InvalidStockError(
                f"Cannot decrement {item.name!r} by {amount}: only {item.stock} in stock."
            )

        previous = item.stock
        with self._writing():
            item.stock = new_stock
        logger.info("Stock of item %s: %s -> %s (%s)", item.id, previous, new_stock, action)
        return item

    def delete_item(self, set_name: Any, item_id: str) -> None:
        item = self.get_item(set_name, item_id)
        inventory_set = item.inventory_set
        with self._writing():
            inventory_set.items.remove(item)
        logger.info("Deleted item %s from set %s", item_id, inventory_set.name)

    # ----------------------------
    # Import / reset
    # ----------------------------

    def _clear_inventory(self) -> None:
        self.session.execute(delete(InventoryItem))
        self.session.execute(delete(InventorySet))
        self.session.expunge_all()

    def import_inventory(self, document: Any, confirm: bool = False) -> ImportSummary:
        """Replace the whole inventory with ``document``.

        The document is validated before anything is touched. Without
        ``confirm`` only the summary is returned, so the caller can ask the
        user before existing data is overwritten.
        """
        if not is_valid_inventory(document):
            raise InvalidImportError("The imported file is not a valid Zaiko inventory.")

        sets = list(iter_sets(document))
        _check_importable(sets)
        item_count = sum(len(entry["items"]) for _, entry in sets)
        if not confirm:
            return ImportSummary(sets=len(sets), items=item_count, applied=False)

        try:
            with self._writing():
                self._clear_inventory()
                seen_ids: set[str] = set()
                for name, entry in sets:
                    self.session.add(self._imported_set(name, entry, seen_ids))
        except (DuplicateNameError, InvalidRecordError) as e:
            raise InvalidImportError("The imported file conflicts with itself (repeated ids or internal codes).") from e

        logger.info("Imported %s sets with %s items", len(sets), item_count)
        return ImportSummary(sets=len(sets), items=item_count, applied=True)

    @staticmethod
    def _claim_id(candidate: Any, seen_ids: set[str]) -> dict[str, str]:
        # Incoming ids are kept when usable; otherwise the model default applies.
        if not is_valid_text(candidate) or candidate in seen_ids or len(candidate) > 36:
            return {}
        seen_ids.add(candidate)
        return {"id": candidate}

    def _imported_set(self, name: str, entry: dict, seen_ids: set[str]) -> InventorySet:
        display, key = _clean_name(name)
        inventory_set = InventorySet(name=display, name_key=key, **self._claim_id(entry.get("id"), seen_ids))

        for position, record in enumerate(entry["items"]):
            barcode, symbology = _clean_barcode(record.get("barcode"))
            internal_code = record.get("internalCode", record.get("zaikode"))
            inventory_set.items.append(
                InventoryItem(
                    **self._claim_id(record.get("id"), seen_ids),
                    name=record["name"].strip(),
                    name_key=normalize_name(record["name"]),
                    description=None if _is_blank(record.get("description")) else record["description"],
                    stock=_imported_stock(record["name"], record["stock"]),
                    barcode=barcode,
                    symbology=symbology,
                    internal_code=None if _is_blank(internal_code) else internal_code.strip(),
                    position=position,
                )
            )
        return inventory_set

    def reset(self) -> None:
        """Delete every set and item and restore default settings."""
        with self._writing():
            self._clear_inventory()
            self.session.execute(delete(Settings))
            self.session.add(Settings(id=1, **DEFAULT_SETTINGS))
        logger.warning("Inventory and settings reset to defaults")

    # ----------------------------
    # Settings
    # ----------------------------

    def get_settings(self) -> Settings:
        settings = self.session.get(Settings, 1)
        if settings is None:
            settings = Settings(id=1, **DEFAULT_SETTINGS)
            with self._writing():
                self.session.add(settings)
        return settings

    def save_settings(self, **values: Any) -> Settings:
        settings = self.get_settings()
        merged = settings.to_dict()
        unknown = set(values) - set(merged)
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(sorted(unknown))}")
        merged.update(values)

        if not is_valid_text(merged["app_name"]):
            raise SettingsError(f"App name {merged['app_name']!r} is NOT valid.")
        try:
            theme = Theme(merged["theme"])
        except ValueError:
            raise SettingsError(f"Theme must be 'light' or 'dark', got {merged['theme']!r}.") from None
        warn, critical = merged["warn_threshold"], merged["critical_threshold"]
        if not _is_stock_count(warn) or not _is_stock_count(critical):
            raise SettingsError("Thresholds must be non-negative integers.")
        if critical > warn:
            raise SettingsError("The critical threshold cannot be above the warning threshold.")

        with self._writing():
            settings.app_name = merged["app_name"].strip()
            settings.theme = theme
            settings.warn_threshold = warn
            settings.critical_threshold = critical
        logger.info("Settings saved: %s", settings.to_dict())
        return settings
