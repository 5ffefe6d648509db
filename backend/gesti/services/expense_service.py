# Overview: Service-layer operations for expenses; plain append/update/delete log.

from __future__ import annotations

from datetime import date

from ..models import Expense
from gesti.time_utils import business_date, utcnow
from .repository import TenantRepository

EXPENSE_MUTABLE_FIELDS = {"description", "amount", "category", "date"}


def list_expenses(
    repo: TenantRepository,
    *,
    start: date | None = None,
    end: date | None = None,
    category: str | None = None,
) -> list[Expense]:
    expenses = repo.all(Expense)
    if start is not None:
        expenses = [e for e in expenses if business_date(e.date) >= start]
    if end is not None:
        expenses = [e for e in expenses if business_date(e.date) <= end]
    if category:
        expenses = [e for e in expenses if e.category.lower() == category.strip().lower()]
    return sorted(expenses, key=lambda e: (e.date, e.id), reverse=True)


def create_expense(repo: TenantRepository, patch: dict) -> Expense:
    expense = Expense(date=utcnow(), category="General")
    for k, v in patch.items():
        if k in EXPENSE_MUTABLE_FIELDS and v is not None:
            setattr(expense, k, v)
    with repo.atomic():
        repo.add(expense)
    return expense


def update_expense(repo: TenantRepository, expense_id: int, patch: dict) -> Expense:
    expense = repo.require(Expense, expense_id, "Expense")
    with repo.atomic():
        for k, v in patch.items():
            if k in EXPENSE_MUTABLE_FIELDS:
                setattr(expense, k, v)
    return expense


def delete_expense(repo: TenantRepository, expense_id: int) -> None:
    expense = repo.require(Expense, expense_id, "Expense")
    with repo.atomic():
        repo.delete(expense)
