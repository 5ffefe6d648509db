# Overview: Company profile and per-tenant preferences.

from __future__ import annotations

from ..errors import ValidationError
from ..models import CompanyInfo
from ..models.settings import THEME_DARK, THEME_LIGHT
from .repository import TenantRepository

COMPANY_FIELDS = {"name", "address", "phone", "phone2", "logo_url"}


def get_company_info(repo: TenantRepository) -> CompanyInfo:
    info = repo.company_info()
    repo.commit()
    return info


def update_company_info(repo: TenantRepository, patch: dict) -> CompanyInfo:
    info = repo.company_info()
    with repo.atomic():
        for k, v in patch.items():
            if k in COMPANY_FIELDS:
                setattr(info, k, v)
    return info


def update_preferences(repo: TenantRepository, *, theme: str | None = None, sales_unit_correction=None) -> CompanyInfo:
    if theme is not None and theme not in (THEME_LIGHT, THEME_DARK):
        raise ValidationError(f"theme must be '{THEME_LIGHT}' or '{THEME_DARK}'")
    if sales_unit_correction is not None and (
        isinstance(sales_unit_correction, bool) or not isinstance(sales_unit_correction, int)
    ):
        raise ValidationError("sales_unit_correction must be an integer")

    info = repo.company_info()
    with repo.atomic():
        if theme is not None:
            info.theme = theme
        if sales_unit_correction is not None:
            info.sales_unit_correction = sales_unit_correction
    return info
