# Overview: Lenient name resolution for products and contacts (exact match, then substring).

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from ..errors import NotFoundError
from ..models import Contact, Product
from .repository import TenantRepository

T = TypeVar("T")


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """Either a resolved entity or the NotFoundError explaining why not."""
    value: T | None = None
    error: NotFoundError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


def _normalize(name: str) -> str:
    return " ".join(name.split()).casefold()


def resolve_by_name(candidates, name: str, kind: str) -> Resolution:
    """
    Two-phase match on `.name`:

    1. case-insensitive exact match (first one wins)
    2. case-insensitive substring match, only if it is unique

    An empty name, no match, or several substring matches is a NotFoundError.
    """
    needle = _normalize(name or "")
    if not needle:
        return Resolution(error=NotFoundError(f"{kind} name is required"))

    candidates = list(candidates)
    for candidate in candidates:
        if _normalize(candidate.name) == needle:
            return Resolution(value=candidate)

    partial = [c for c in candidates if needle in _normalize(c.name)]
    if len(partial) == 1:
        return Resolution(value=partial[0])
    if len(partial) > 1:
        return Resolution(error=NotFoundError(
            f"{kind} '{name}' is ambiguous",
            details={"name": name, "matches": sorted(c.name for c in partial)},
        ))
    return Resolution(error=NotFoundError(f"{kind} '{name}' not found", details={"name": name}))


def resolve_product(repo: TenantRepository, name: str) -> Resolution[Product]:
    return resolve_by_name(repo.all(Product), name, "Product")


def resolve_contact(repo: TenantRepository, name: str) -> Resolution[Contact]:
    return resolve_by_name(repo.all(Contact), name, "Contact")
