from __future__ import annotations

from ..extensions import db
from gesti.time_utils import to_utc_z


class Contact(db.Model):
    """
    Customer for credit sales and invoices.

    next_invoice_number is the per-contact invoice sequence; it is advanced
    inside the same database transaction that records the sale.
    """
    __tablename__ = "contacts"
    __table_args__ = (
        db.Index("ix_contacts_user_name", "user_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    next_invoice_number = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "next_invoice_number": self.next_invoice_number,
            "created_at": to_utc_z(self.created_at),
        }
