from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, List

from zaiko import db

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    Mapped,
    mapped_column,
    relationship,
)

# ----------------------------
# Helpers
# ----------------------------

def utcnow() -> datetime:
    # SQLite has no real TZ; store UTC consistently.
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())

# ----------------------------
# Enums
# ----------------------------

class Theme(str, enum.Enum):
    light = "light"
    dark = "dark"


# ----------------------------
# Models
# ----------------------------

class InventorySet(db.Model):
    """
    A named grouping of items. Names are unique by their canonical key.
    """
    __tablename__ = "inv_sets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Display name as the user first typed it.
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # normalize_name(name); used for every lookup and duplicate check.
    name_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    items: Mapped[List["InventoryItem"]] = relationship(
        back_populates="inventory_set",
        cascade="all, delete-orphan",
        order_by=lambda: [InventoryItem.position.asc(), InventoryItem.created_at.asc()],
    )

    __table_args__ = (
        CheckConstraint("length(name_key) > 0", name="ck_set_name_key_nonempty"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
        }


class InventoryItem(db.Model):
    """
    A stock-keeping unit inside a set.
    """
    __tablename__ = "inv_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)

    set_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("inv_sets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Retail barcode (EAN-13 / UPC-A) and the symbology it validated as.
    barcode: Mapped[Optional[str]] = mapped_column(String(13), nullable=True, index=True)
    symbology: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    # ZAIKO-ITEM-<n>, rendered as Code 128.
    internal_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)

    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    inventory_set: Mapped["InventorySet"] = relationship(back_populates="items")

    __table_args__ = (
        UniqueConstraint("set_id", "name_key", name="uq_item_name_per_set"),
        CheckConstraint("stock >= 0", name="ck_item_stock_nonnegative"),
        Index("ix_item_set_position", "set_id", "position"),
    )

    def to_dict(self) -> dict[str, Any]:
        """Export shape of an item, shared by the API and JSON export."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "stock": self.stock,
            "barcode": self.barcode,
            "internalCode": self.internal_code,
        }


class Settings(db.Model):
    """
    Single-row table of user preferences.
    """
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    app_name: Mapped[str] = mapped_column(String(128), default="Zaiko", nullable=False)
    theme: Mapped[Theme] = mapped_column(Enum(Theme), default=Theme.light, nullable=False)
    warn_threshold: Mapped[int] = mapped_column(Integer, default=20, nullable=False)
    critical_threshold: Mapped[int] = mapped_column(Integer, default=5, nullable=False)

    __table_args__ = (
        CheckConstraint("id = 1", name="ck_settings_single_row"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "app_name": self.app_name,
            "theme": self.theme.value,
            "warn_threshold": self.warn_threshold,
            "critical_threshold": self.critical_threshold,
        }
