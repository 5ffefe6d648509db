from __future__ import annotations

from ..extensions import db


THEME_LIGHT = "light"
THEME_DARK = "dark"


class CompanyInfo(db.Model):
    """
    Per-tenant company profile and preferences (one row per user).

    next_invoice_number is the walk-in (no contact) invoice sequence.
    """
    __tablename__ = "company_info"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_company_info_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    name = db.Column(db.String(255), nullable=False, default="Mi Tiendita")
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    phone2 = db.Column(db.String(32), nullable=True)
    logo_url = db.Column(db.String(1024), nullable=True)

    theme = db.Column(db.String(8), nullable=False, default=THEME_LIGHT)
    sales_unit_correction = db.Column(db.Integer, nullable=False, default=0)
    next_invoice_number = db.Column(db.Integer, nullable=False, default=1)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "phone2": self.phone2,
            "logo_url": self.logo_url,
        }

    def preferences_dict(self) -> dict:
        return {
            "theme": self.theme,
            "sales_unit_correction": self.sales_unit_correction,
        }
