from __future__ import annotations

from ..extensions import db
from gesti.time_utils import to_utc_z


# Stock history reason codes
REASON_INITIAL = "initial"
REASON_SALE = "sale"
REASON_SALE_UPDATE = "sale_update"
REASON_SALE_DELETE = "sale_delete"
REASON_ADJUSTMENT = "adjustment"
REASON_RESTOCK = "restock"
REASON_RESTOCK_UPDATE = "restock_update"
REASON_RESTOCK_DELETE = "restock_delete"

STOCK_REASONS = (
    REASON_INITIAL,
    REASON_SALE,
    REASON_SALE_UPDATE,
    REASON_SALE_DELETE,
    REASON_ADJUSTMENT,
    REASON_RESTOCK,
    REASON_RESTOCK_UPDATE,
    REASON_RESTOCK_DELETE,
)


class Product(db.Model):
    """
    Catalog item with a stored stock level.

    INVARIANT: stock is never negative after a commit, and it is only changed
    through inventory_service.apply_stock_change, which appends exactly one
    StockHistoryEntry per change.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_user_name", "user_id", "name"),
        db.CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Integer, nullable=False, default=0)
    cost = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(1024), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    stock_history = db.relationship(
        "StockHistoryEntry",
        backref="product",
        lazy=True,
        order_by="StockHistoryEntry.id",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_history: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "cost": self.cost,
            "stock": self.stock,
            "image_url": self.image_url,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_history:
            data["stock_history"] = [entry.to_dict() for entry in self.stock_history]
        return data


class StockHistoryEntry(db.Model):
    """
    Append-only record of a signed stock change and its cause.

    transaction_id / stock_in_id are plain references (no FK): the history
    outlives the sale or restock that produced it.
    """
    __tablename__ = "stock_history"
    __table_args__ = (
        db.Index("ix_stock_history_product_occurred", "product_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)
    change = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(32), nullable=False, index=True)

    transaction_id = db.Column(db.Integer, nullable=True, index=True)
    stock_in_id = db.Column(db.Integer, nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "occurred_at": to_utc_z(self.occurred_at),
            "change": self.change,
            "reason": self.reason,
            "transaction_id": self.transaction_id,
            "stock_in_id": self.stock_in_id,
        }
