# Overview: Typed commands accepted from the conversational assistant.

"""
Assistant Commands

The chat agent calls one of three functions with loosely-typed arguments.
parse_command() turns (name, args) into one of the frozen command types
below or raises ValidationError; nothing reaches the services unvalidated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from ..errors import ValidationError
from ..models.sales import METHOD_CREDIT, PAYMENT_METHODS, normalize_payment_method
from ..validation import MAX_AMOUNT, require_positive_int


@dataclass(frozen=True)
class SaleItem:
    product_name: str
    quantity: int


@dataclass(frozen=True)
class AddSale:
    items: tuple[SaleItem, ...]
    payment_method: str
    contact_name: str | None = None
    term_days: int | None = None


@dataclass(frozen=True)
class AddPayment:
    contact_name: str
    amount: int


@dataclass(frozen=True)
class UpdateProduct:
    product_name: str
    fields: dict = field(default_factory=dict)


Command = Union[AddSale, AddPayment, UpdateProduct]

UPDATABLE_PRODUCT_FIELDS = ("name", "price", "cost", "stock")


def _name(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def _optional_name(value: Any, field_name: str) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _name(value, field_name)


def _non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{field_name} cannot exceed {MAX_AMOUNT}")
    return value


def _parse_add_sale(args: dict) -> AddSale:
    raw_items = args.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValidationError("Each item needs product_name and quantity")
        items.append(SaleItem(
            product_name=_name(raw.get("product_name"), "product_name"),
            quantity=require_positive_int(raw.get("quantity"), "quantity"),
        ))

    method = normalize_payment_method(args.get("payment_method"))
    if method is None:
        raise ValidationError(
            f"Invalid payment method: {args.get('payment_method')}. Must be one of {list(PAYMENT_METHODS)}"
        )

    term_days = args.get("term_days")
    if term_days is not None:
        term_days = _non_negative_int(term_days, "term_days")
        if method != METHOD_CREDIT:
            term_days = None

    return AddSale(
        items=tuple(items),
        payment_method=method,
        contact_name=_optional_name(args.get("contact_name"), "contact_name"),
        term_days=term_days,
    )


def _parse_add_payment(args: dict) -> AddPayment:
    return AddPayment(
        contact_name=_name(args.get("contact_name"), "contact_name"),
        amount=require_positive_int(args.get("amount"), "amount"),
    )


def _parse_update_product(args: dict) -> UpdateProduct:
    product_name = _name(args.get("product_name"), "product_name")
    raw_fields = args.get("fields")
    if raw_fields is None:
        # Flat form: {"product_name": ..., "price": 3200}
        raw_fields = {k: v for k, v in args.items() if k in UPDATABLE_PRODUCT_FIELDS}
    if not isinstance(raw_fields, dict) or not raw_fields:
        raise ValidationError(f"Nothing to update; allowed fields: {list(UPDATABLE_PRODUCT_FIELDS)}")

    fields = {}
    for key, value in raw_fields.items():
        if key not in UPDATABLE_PRODUCT_FIELDS:
            raise ValidationError(f"Field not allowed: {key}")
        if key == "name":
            fields[key] = _name(value, "name")
        else:
            fields[key] = _non_negative_int(value, key)

    return UpdateProduct(product_name=product_name, fields=fields)


PARSERS = {
    "add_sale": _parse_add_sale,
    "add_payment": _parse_add_payment,
    "update_product": _parse_update_product,
}


def parse_command(name: str, args: Any) -> Command:
    parser = PARSERS.get(name)
    if parser is None:
        raise ValidationError(f"Unknown command: {name}", details={"allowed": sorted(PARSERS)})
    if not isinstance(args, dict):
        raise ValidationError("Command arguments must be an object")
    return parser(args)
