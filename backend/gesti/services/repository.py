# Overview: Tenant-scoped repository over the SQLAlchemy session; read-through cache, write-through commits.

"""
Tenant Repository

The browser app this backend serves used to keep a global in-memory mirror of
every remote collection and re-sync it on each write. Here that mirror is an
explicit object, one per request and tenant:

- Reads are read-through: the first access to a collection loads every row the
  tenant owns; later reads are served from the in-memory map.
- Writes are write-through: services mutate ORM objects inside `atomic()`,
  which commits once at the end. A failed commit rolls the session back,
  drops the cached collections and raises PersistenceError, so the caller
  never observes a half-applied operation.
"""

from __future__ import annotations

from contextlib import contextmanager

from flask import current_app, g, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFoundError, PersistenceError
from ..models import CompanyInfo
from ..models.settings import THEME_LIGHT


class TenantRepository:
    def __init__(self, user_id: int, session=None):
        self.user_id = user_id
        self.session = session or db.session
        self._cache: dict[type, dict[int, object]] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _load(self, model) -> dict[int, object]:
        cached = self._cache.get(model)
        if cached is None:
            rows = (
                self.session.query(model)
                .filter_by(user_id=self.user_id)
                .order_by(model.id.asc())
                .all()
            )
            cached = {row.id: row for row in rows}
            self._cache[model] = cached
        return cached

    def all(self, model) -> list:
        return list(self._load(model).values())

    def get(self, model, entity_id):
        if entity_id is None:
            return None
        return self._load(model).get(entity_id)

    def require(self, model, entity_id, label: str | None = None):
        entity = self.get(model, entity_id)
        if entity is None:
            label = label or model.__name__
            raise NotFoundError(f"{label} {entity_id} not found", details={"id": entity_id})
        return entity

    def company_info(self) -> CompanyInfo:
        info = self.session.query(CompanyInfo).filter_by(user_id=self.user_id).first()
        if info is None:
            info = CompanyInfo(
                user_id=self.user_id,
                name="Mi Tiendita",
                theme=THEME_LIGHT,
                sales_unit_correction=0,
                next_invoice_number=1,
            )
            self.session.add(info)
            self._flush()
        return info

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, entity):
        entity.user_id = self.user_id
        self.session.add(entity)
        self._flush()
        cached = self._cache.get(type(entity))
        if cached is not None:
            cached[entity.id] = entity
        return entity

    def delete(self, entity) -> None:
        self.session.delete(entity)
        cached = self._cache.get(type(entity))
        if cached is not None:
            cached.pop(entity.id, None)

    def _flush(self) -> None:
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            self.rollback()
            raise PersistenceError("Could not write to the database") from exc

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.rollback()
            if has_app_context():
                current_app.logger.warning("Commit failed for user %s: %s", self.user_id, exc)
            raise PersistenceError("Operation did not apply: database write failed") from exc

    def rollback(self) -> None:
        self.session.rollback()
        self._cache.clear()

    def invalidate(self) -> None:
        self._cache.clear()

    @contextmanager
    def atomic(self):
        """All-or-nothing unit: commit on success, roll back on any error."""
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()


def get_repository() -> TenantRepository:
    """Repository for the authenticated tenant of the current request."""
    repo = getattr(g, "_gesti_repository", None)
    if repo is None or repo.user_id != g.user_id:
        repo = TenantRepository(g.user_id)
        g._gesti_repository = repo
    return repo
