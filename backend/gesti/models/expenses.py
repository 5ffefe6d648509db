from __future__ import annotations

from ..extensions import db
from gesti.time_utils import to_utc_z


class Expense(db.Model):
    """Operating expense. No cross-entity invariants."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_user_date", "user_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(64), nullable=False, default="General")
    date = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "date": to_utc_z(self.date),
        }
