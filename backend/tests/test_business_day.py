# Overview: Pytest coverage for calendar-day logic under a non-UTC business timezone.

"""
Stored timestamps are UTC. A sale made at 20:00 in Bogota (UTC-5) is stored
as 01:00 UTC of the next day, but due dates, debt status, the daily report
and date filters must all treat it as belonging to the local day.
"""

from datetime import date, datetime

import pytest

from gesti.models.sales import METHOD_CREDIT
from gesti.services import debt_service, expense_service, reporting_service
from gesti.services.sales_service import commit_sale, compute_due_date, list_sales
from gesti.time_utils import business_date


@pytest.fixture
def bogota(app, monkeypatch):
    monkeypatch.setitem(app.config, "GESTI_TIMEZONE", "America/Bogota")


@pytest.fixture
def evening_credit_sale(bogota, repo, soda, neighbor):
    return commit_sale(
        repo,
        [{"product_id": soda.id, "quantity": 1}],
        METHOD_CREDIT,
        contact_id=neighbor.id,
        term_days=1,
        sale_date="2024-05-01T20:00:00-05:00",
    )


def test_business_date_uses_local_day():
    stored = datetime(2024, 5, 2, 1, 0)
    assert business_date(stored, "America/Bogota") == date(2024, 5, 1)
    assert business_date(stored, "UTC") == date(2024, 5, 2)


def test_due_date_counts_from_local_sale_day(bogota):
    assert compute_due_date(datetime(2024, 5, 2, 1, 0), METHOD_CREDIT, 1) == date(2024, 5, 1)
    assert compute_due_date(datetime(2024, 5, 2, 1, 0), METHOD_CREDIT, 8) == date(2024, 5, 8)


def test_evening_credit_sale_is_due_today_on_sale_day(repo, evening_credit_sale):
    assert evening_credit_sale.date == datetime(2024, 5, 2, 1, 0)
    assert evening_credit_sale.due_date == date(2024, 5, 1)

    debts = debt_service.open_debts(repo, on=date(2024, 5, 1))
    assert [d.status for d in debts] == [debt_service.STATUS_DUE_TODAY]


def test_daily_summary_uses_local_day(repo, evening_credit_sale):
    expense_service.create_expense(repo, {
        "description": "Bolsas", "amount": 500, "date": datetime(2024, 5, 2, 2, 30),
    })

    summary = reporting_service.daily_summary(repo, on=date(2024, 5, 1))
    assert summary["total_sales"] == 2500
    assert summary["sales_count"] == 1
    assert summary["total_expenses"] == 500

    next_day = reporting_service.daily_summary(repo, on=date(2024, 5, 2))
    assert next_day["sales_count"] == 0
    assert next_day["total_expenses"] == 0


def test_date_filters_use_local_day(repo, evening_credit_sale):
    expense_service.create_expense(repo, {
        "description": "Bolsas", "amount": 500, "date": datetime(2024, 5, 2, 2, 30),
    })

    one_day = {"start": date(2024, 5, 1), "end": date(2024, 5, 1)}
    assert [t.id for t in list_sales(repo, **one_day)] == [evening_credit_sale.id]
    assert len(expense_service.list_expenses(repo, **one_day)) == 1
    assert list_sales(repo, start=date(2024, 5, 2)) == []
