from __future__ import annotations

from ..extensions import db
from gesti.time_utils import to_utc_z, to_iso_date


# Payment methods
METHOD_CASH = "CASH"
METHOD_CREDIT = "CREDIT"
METHOD_TRANSFER = "TRANSFER"

PAYMENT_METHODS = (METHOD_CASH, METHOD_CREDIT, METHOD_TRANSFER)

# Labels used by the Spanish-language browser app and chat assistant
METHOD_ALIASES = {
    "efectivo": METHOD_CASH,
    "crédito": METHOD_CREDIT,
    "credito": METHOD_CREDIT,
    "transferencia": METHOD_TRANSFER,
    "cash": METHOD_CASH,
    "credit": METHOD_CREDIT,
    "transfer": METHOD_TRANSFER,
}


def normalize_payment_method(value) -> str | None:
    """Canonical method for a constant or alias (case-insensitive), else None."""
    if value in PAYMENT_METHODS:
        return value
    return METHOD_ALIASES.get(str(value or "").strip().casefold())


class Transaction(db.Model):
    """
    Sale record.

    total_amount is frozen from the lines at commit time and only re-derived
    by an explicit edit. Payments are partial settlements of a credit sale;
    their sum never exceeds total_amount.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_user_date", "user_id", "date"),
        db.Index("ix_transactions_user_contact", "user_id", "contact_id"),
        db.Index("ix_transactions_user_method", "user_id", "payment_method"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Per-contact sequence, or the tenant's walk-in sequence when contact_id is NULL
    invoice_number = db.Column(db.Integer, nullable=False)

    total_amount = db.Column(db.Integer, nullable=False, default=0)
    date = db.Column(db.DateTime(timezone=True), nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)

    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=True)
    # Only meaningful for CREDIT
    due_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        lazy=True,
        order_by="TransactionItem.id",
        cascade="all, delete-orphan",
    )
    payments = db.relationship(
        "Payment",
        backref="transaction",
        lazy=True,
        order_by="Payment.id",
        cascade="all, delete-orphan",
    )
    contact = db.relationship("Contact", backref=db.backref("transactions", lazy=True))

    @property
    def total_paid(self) -> int:
        return sum(p.amount for p in self.payments)

    @property
    def outstanding(self) -> int:
        return self.total_amount - self.total_paid

    @property
    def invoice_label(self) -> str:
        return f"{self.invoice_number:03d}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "invoice_label": self.invoice_label,
            "items": [item.to_dict() for item in self.items],
            "total_amount": self.total_amount,
            "date": to_utc_z(self.date),
            "payment_method": self.payment_method,
            "contact_id": self.contact_id,
            "due_date": to_iso_date(self.due_date),
            "payments": [p.to_dict() for p in self.payments],
            "total_paid": self.total_paid,
            "outstanding": self.outstanding,
        }


class TransactionItem(db.Model):
    """Line item; unit_price is a snapshot taken when the sale was committed."""
    __tablename__ = "transaction_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)

    # NULL once the product has been deleted from the catalog
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)

    @property
    def subtotal(self) -> int:
        return self.quantity * self.unit_price

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "subtotal": self.subtotal,
        }


class Payment(db.Model):
    """Partial payment against a transaction. Addressed by position (index)."""
    __tablename__ = "payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)

    amount = db.Column(db.Integer, nullable=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "date": to_utc_z(self.paid_at),
        }
