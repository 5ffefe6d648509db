# Overview: Read-only debt views derived from the transaction ledger.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..models import Contact, Transaction
from ..models.sales import METHOD_CREDIT
from gesti.time_utils import business_today, to_iso_date, to_utc_z
from .repository import TenantRepository


STATUS_OVERDUE = "overdue"
STATUS_DUE_TODAY = "due_today"
STATUS_UPCOMING = "upcoming"


def today() -> date:
    return business_today()


def classify_due(due_date: date | None, on: date) -> str:
    """Date-only comparison; a debt with no due date is never overdue."""
    if due_date is None:
        return STATUS_UPCOMING
    if due_date < on:
        return STATUS_OVERDUE
    if due_date == on:
        return STATUS_DUE_TODAY
    return STATUS_UPCOMING


@dataclass(frozen=True)
class Debt:
    transaction: Transaction
    outstanding: int
    status: str

    def to_dict(self) -> dict:
        t = self.transaction
        return {
            "transaction_id": t.id,
            "invoice_label": t.invoice_label,
            "contact_id": t.contact_id,
            "contact_name": t.contact.name if t.contact else None,
            "date": to_utc_z(t.date),
            "due_date": to_iso_date(t.due_date),
            "total_amount": t.total_amount,
            "total_paid": t.total_paid,
            "outstanding": self.outstanding,
            "status": self.status,
        }


def open_debts(
    repo: TenantRepository,
    contact_id: int | None = None,
    on: date | None = None,
) -> list[Debt]:
    """
    Credit transactions with a positive balance, soonest due first
    (no due date last).
    """
    on = on or today()
    debts = []
    for t in repo.all(Transaction):
        if t.payment_method != METHOD_CREDIT:
            continue
        if contact_id is not None and t.contact_id != contact_id:
            continue
        outstanding = t.outstanding
        if outstanding <= 0:
            continue
        debts.append(Debt(t, outstanding, classify_due(t.due_date, on)))

    debts.sort(key=lambda d: (d.transaction.due_date is None, d.transaction.due_date or date.max, d.transaction.date))
    return debts


def outstanding_for_contact(repo: TenantRepository, contact_id: int) -> int:
    repo.require(Contact, contact_id, "Contact")
    return sum(d.outstanding for d in open_debts(repo, contact_id=contact_id))


def contact_balances(repo: TenantRepository, on: date | None = None) -> list[dict]:
    """Per-contact totals for every contact with an open credit balance."""
    on = on or today()
    totals: dict[int | None, dict] = {}
    for debt in open_debts(repo, on=on):
        key = debt.transaction.contact_id
        row = totals.get(key)
        if row is None:
            contact = debt.transaction.contact
            row = {
                "contact_id": key,
                "contact_name": contact.name if contact else None,
                "outstanding": 0,
                "overdue": 0,
                "open_count": 0,
            }
            totals[key] = row
        row["outstanding"] += debt.outstanding
        row["open_count"] += 1
        if debt.status == STATUS_OVERDUE:
            row["overdue"] += debt.outstanding

    return sorted(totals.values(), key=lambda r: -r["outstanding"])
