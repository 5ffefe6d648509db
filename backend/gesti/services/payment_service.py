# Overview: Service-layer operations for payment; encapsulates business logic and database work.

"""
Payment Service

WHY: Credit sales are paid over time. Payments are partial settlements
recorded on the transaction, addressed by their position in the list.

INVARIANT: sum(payments) <= total_amount, before and after every add, edit
or delete. An edit is validated against total - sum(other payments) so the
entry being edited is not counted twice.
"""

from __future__ import annotations

from ..errors import NotFoundError, ValidationError
from ..models import Contact, Payment, Transaction
from ..models.sales import METHOD_CREDIT
from ..validation import require_positive_int
from gesti.time_utils import coerce_datetime
from .repository import TenantRepository


def _validate_amount(amount) -> int:
    try:
        return require_positive_int(amount, "amount")
    except ValidationError:
        raise ValidationError("Payment amount must be a positive integer", details={"amount": amount})


def _check_not_over(transaction: Transaction, amount: int, already_paid: int) -> None:
    remaining = transaction.total_amount - already_paid
    if amount > remaining:
        raise ValidationError(
            f"Payment exceeds outstanding balance by {amount - remaining}",
            details={
                "transaction_id": transaction.id,
                "amount": amount,
                "outstanding": remaining,
                "excess": amount - remaining,
            },
        )


def _payment_at(transaction: Transaction, index) -> Payment:
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValidationError("payment index must be an integer")
    if index < 0 or index >= len(transaction.payments):
        raise NotFoundError(
            f"Payment {index} not found on transaction {transaction.id}",
            details={"transaction_id": transaction.id, "index": index},
        )
    return transaction.payments[index]


def add_payment(repo: TenantRepository, transaction_id: int, amount, *, paid_at=None) -> Payment:
    """
    Append a payment.

    Raises:
        ValidationError: amount <= 0 or amount > outstanding balance
        NotFoundError: transaction not found
    """
    amount = _validate_amount(amount)
    transaction = repo.require(Transaction, transaction_id, "Transaction")
    _check_not_over(transaction, amount, transaction.total_paid)

    with repo.atomic():
        payment = Payment(amount=amount, paid_at=coerce_datetime(paid_at))
        transaction.payments.append(payment)

    return payment


def update_payment(repo: TenantRepository, transaction_id: int, index: int, amount) -> Payment:
    """Change the amount of the payment at `index`."""
    amount = _validate_amount(amount)
    transaction = repo.require(Transaction, transaction_id, "Transaction")
    payment = _payment_at(transaction, index)

    others = transaction.total_paid - payment.amount
    _check_not_over(transaction, amount, others)

    with repo.atomic():
        payment.amount = amount

    return payment


def delete_payment(repo: TenantRepository, transaction_id: int, index: int) -> None:
    transaction = repo.require(Transaction, transaction_id, "Transaction")
    payment = _payment_at(transaction, index)

    with repo.atomic():
        transaction.payments.remove(payment)


def oldest_open_credit(repo: TenantRepository, contact: Contact) -> Transaction | None:
    """Oldest (by sale date) credit transaction of the contact with a balance."""
    open_debts = [
        t for t in repo.all(Transaction)
        if t.contact_id == contact.id
        and t.payment_method == METHOD_CREDIT
        and t.outstanding > 0
    ]
    if not open_debts:
        return None
    return min(open_debts, key=lambda t: (t.date, t.id))


def apply_payment_to_contact(repo: TenantRepository, contact_id: int, amount) -> tuple[Transaction, Payment]:
    """
    Apply a payment to the contact's oldest open credit debt.

    The payment is not split across debts: an amount larger than that debt's
    balance is rejected like any other over-payment.
    """
    amount = _validate_amount(amount)
    contact = repo.require(Contact, contact_id, "Contact")
    transaction = oldest_open_credit(repo, contact)
    if transaction is None:
        raise NotFoundError(
            f"{contact.name} has no open credit debts",
            details={"contact_id": contact.id},
        )
    payment = add_payment(repo, transaction.id, amount)
    return transaction, payment
