from __future__ import annotations

from ..extensions import db
from gesti.time_utils import to_utc_z


class StockInEntry(db.Model):
    """Restock record; posting it increases stock for each listed product."""
    __tablename__ = "stock_in_entries"
    __table_args__ = (
        db.Index("ix_stock_in_user_date", "user_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    date = db.Column(db.DateTime(timezone=True), nullable=False)
    reference = db.Column(db.String(128), nullable=True)

    items = db.relationship(
        "StockInItem",
        backref="entry",
        lazy=True,
        order_by="StockInItem.id",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "reference": self.reference,
            "items": [item.to_dict() for item in self.items],
        }


class StockInItem(db.Model):
    __tablename__ = "stock_in_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    entry_id = db.Column(db.Integer, db.ForeignKey("stock_in_entries.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {"product_id": self.product_id, "quantity": self.quantity}
