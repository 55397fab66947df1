"""Tests for override create/update/soft-delete."""

import pytest

from src.config.settings import DEFAULT_CATEGORIES
from src.services.override_administration import OverrideAdministration


@pytest.fixture
def administration(override_store) -> OverrideAdministration:
    return OverrideAdministration(override_store, DEFAULT_CATEGORIES, default_updated_by="system")


def test_save_creates_active_row(administration, override_store):
    saved = administration.save("database.port", "5433", description="replica port", updated_by="alice")

    assert saved.id is not None
    assert saved.is_active
    assert saved.category == "database"
    assert saved.updated_by == "alice"
    assert saved.created_at is not None and saved.updated_at is not None
    assert list(override_store.rows) == ["database.port"]


def test_save_updates_existing_row_in_place(administration, override_store):
    first = administration.save("a.b", "1", category="alpha")
    second = administration.save("a.b", "2", description="changed")

    assert second.id == first.id
    assert second.value == "2"
    assert second.category == "a"
    assert second.description == "changed"
    assert len(override_store.rows) == 1


def test_save_uses_default_attribution(administration):
    assert administration.save("a.b", "1").updated_by == "system"


def test_save_accepts_empty_value(administration):
    assert administration.save("feature.flag", "").value == ""


@pytest.mark.parametrize("key", ["", "   "])
def test_save_rejects_blank_key(administration, key):
    with pytest.raises(ValueError):
        administration.save(key, "1")


def test_save_rejects_missing_value(administration):
    with pytest.raises(ValueError):
        administration.save("a.b", None)


def test_reactivation_keeps_single_row(administration, override_store):
    created = administration.save("a.b", "v1")
    administration.delete("a.b")
    reactivated = administration.save("a.b", "v2")

    assert list(override_store.rows) == ["a.b"]
    assert reactivated.id == created.id
    assert reactivated.is_active
    assert reactivated.value == "v2"


def test_delete_unknown_key_is_noop(administration, override_store):
    administration.delete("never.saved")

    assert override_store.rows == {}
    assert override_store.saves == 0


def test_delete_twice_leaves_one_inactive_row(administration, override_store):
    administration.save("a.b", "1")
    administration.delete("a.b")
    administration.delete("a.b")

    assert len(override_store.rows) == 1
    assert override_store.rows["a.b"].is_active is False
    assert override_store.find_active_by_key("a.b") is None


def test_delete_all_returns_count(administration, override_store):
    for index in range(3):
        administration.save(f"key.{index}", str(index))
    administration.save("gone.key", "x")
    administration.delete("gone.key")

    assert administration.delete_all() == 3
    assert administration.active_count() == 0
    assert len(override_store.rows) == 4


def test_delete_all_without_overrides(administration):
    assert administration.delete_all() == 0


def test_delete_all_is_attributed(administration, override_store):
    administration.save("a.b", "1", updated_by="alice")

    administration.delete_all()

    assert override_store.rows["a.b"].updated_by == "system"


def test_failed_delete_all_changes_nothing(administration, override_store):
    for index in range(3):
        administration.save(f"key.{index}", str(index))
    override_store.fail_writes = True

    with pytest.raises(ConnectionError):
        administration.delete_all()

    assert administration.active_count() == 3


def test_write_failure_is_surfaced(administration, override_store):
    override_store.fail_writes = True

    with pytest.raises(ConnectionError):
        administration.save("a.b", "1")


def test_list_categories_falls_back_to_defaults(administration):
    categories = administration.list_categories()

    assert categories == list(DEFAULT_CATEGORIES)
    assert categories


def test_list_categories_from_active_rows(administration):
    administration.save("server.port", "1")
    administration.save("database.url", "2")
    administration.save("cache.ttl", "3")
    administration.delete("cache.ttl")

    assert administration.list_categories() == ["database", "server"]


def test_list_categories_falls_back_when_store_fails(administration, override_store):
    override_store.unavailable = True

    assert administration.list_categories() == list(DEFAULT_CATEGORIES)


def test_active_count_returns_zero_on_store_fault(administration, override_store):
    administration.save("a.b", "1")
    assert administration.active_count() == 1

    override_store.unavailable = True

    assert administration.active_count() == 0


def test_requires_default_categories(override_store):
    with pytest.raises(ValueError):
        OverrideAdministration(override_store, [])
