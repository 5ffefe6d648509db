# Overview: Pytest coverage for lenient name resolution.

from types import SimpleNamespace

import pytest

from gesti.errors import NotFoundError
from gesti.services.resolver import resolve_by_name, resolve_product


def _named(*names):
    return [SimpleNamespace(name=n) for n in names]


def test_exact_match_preferred_over_substring():
    candidates = _named("Coca-Cola 350ml", "Coca-Cola")
    result = resolve_by_name(candidates, "coca-cola", "Product")
    assert result.ok
    assert result.value.name == "Coca-Cola"


def test_unique_substring_match():
    result = resolve_by_name(_named("Chocoramo", "Jumbo Jet"), "  choco ", "Product")
    assert result.unwrap().name == "Chocoramo"


def test_ambiguous_substring_is_not_found():
    result = resolve_by_name(_named("Agua Cristal 600ml", "Agua Brisa"), "agua", "Product")
    assert not result.ok
    assert isinstance(result.error, NotFoundError)
    assert result.error.details["matches"] == ["Agua Brisa", "Agua Cristal 600ml"]


@pytest.mark.parametrize("name", ["", "   ", None, "pan"])
def test_unresolved_names(name):
    result = resolve_by_name(_named("Chocoramo"), name, "Product")
    with pytest.raises(NotFoundError):
        result.unwrap()


def test_resolution_is_tenant_scoped(repo, repo_b, soda):
    assert resolve_product(repo, "coca").ok
    assert not resolve_product(repo_b, "coca").ok
