# Overview: Service-layer operations for contacts.

from __future__ import annotations

from ..models import Contact, Transaction
from .repository import TenantRepository

CONTACT_MUTABLE_FIELDS = {"name", "phone"}


def list_contacts(repo: TenantRepository) -> list[Contact]:
    return sorted(repo.all(Contact), key=lambda c: (c.name.lower(), c.id))


def create_contact(repo: TenantRepository, patch: dict) -> Contact:
    contact = Contact(next_invoice_number=1)
    for k, v in patch.items():
        if k in CONTACT_MUTABLE_FIELDS:
            setattr(contact, k, v)
    with repo.atomic():
        repo.add(contact)
    return contact


def update_contact(repo: TenantRepository, contact_id: int, patch: dict) -> Contact:
    contact = repo.require(Contact, contact_id, "Contact")
    with repo.atomic():
        for k, v in patch.items():
            if k in CONTACT_MUTABLE_FIELDS:
                setattr(contact, k, v)
    return contact


def delete_contact(repo: TenantRepository, contact_id: int) -> None:
    """Delete contact; its sales stay in the ledger as walk-in sales."""
    contact = repo.require(Contact, contact_id, "Contact")
    with repo.atomic():
        # Sales keep their per-contact invoice_number, so a former contact's
        # invoice 003 can share its label with walk-in invoice 003.
        for t in repo.all(Transaction):
            if t.contact_id == contact.id:
                t.contact = None
        repo.delete(contact)
