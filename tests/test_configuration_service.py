"""Tests for the administration facade."""

import pytest

from src.config.settings import DEFAULT_CATEGORIES
from src.domain.errors import PersistenceError
from src.resolver.aggregator import Aggregator
from src.services.configuration_service import ConfigurationService
from src.services.override_administration import OverrideAdministration


@pytest.fixture
def service(resolver, override_store, volatile_store, base_config) -> ConfigurationService:
    return ConfigurationService(
        resolver=resolver,
        aggregator=Aggregator(override_store, volatile_store, base_config),
        administration=OverrideAdministration(override_store, DEFAULT_CATEGORIES),
        volatile_store=volatile_store,
    )


def test_list_effective_groups_and_sorts(service, base_config, volatile_store):
    base_config.put("server.port", "8080")
    base_config.put("server.host", "0.0.0.0")
    base_config.put("timeout", "30")
    volatile_store.set("config:cache.ttl", "60")
    service.save_override("server.port", "9090", description="public")

    listing = service.list_effective()

    assert list(listing) == ["cache", "general", "server"]
    assert [view.key for view in listing["server"]] == ["server.host", "server.port"]
    port = listing["server"][1]
    assert port.value == port.current_value == "9090"
    assert port.source == "OVERRIDE"
    assert port.description == "public"
    assert listing["cache"][0].source == "VOLATILE"
    assert listing["general"][0].source == "BASE_FILE"


def test_list_effective_filters_by_category(service, base_config):
    base_config.put("server.port", "8080")
    base_config.put("database.url", "postgres://db")

    listing = service.list_effective("database")

    assert list(listing) == ["database"]
    assert listing["database"][0].key == "database.url"


def test_list_effective_unknown_category_is_empty(service, base_config):
    base_config.put("server.port", "8080")

    assert service.list_effective("nope") == {}


def test_get_effective_value(service, base_config):
    base_config.put("server.port", "8080")

    assert service.get_effective_value("server.port") == {"key": "server.port", "value": "8080"}
    assert service.get_effective_value("missing") == {"key": "missing", "value": ""}


def test_override_lifecycle_through_service(service):
    service.save_override("a.b", "1", updated_by="bob")
    assert service.get_effective_value("a.b")["value"] == "1"
    assert service.active_override_count() == 1
    assert service.list_categories() == ["a"]

    service.delete_override("a.b")
    assert service.get_effective_value("a.b")["value"] == ""
    assert service.active_override_count() == 0
    assert service.list_categories() == list(DEFAULT_CATEGORIES)


def test_delete_all_overrides(service):
    service.save_override("a.b", "1")
    service.save_override("c.d", "2")

    assert service.delete_all_overrides() == 2
    assert service.active_override_count() == 0


def test_volatile_round_trip(service, volatile_store):
    service.save_to_volatile("cache.ttl", "60")

    assert volatile_store.data == {"config:cache.ttl": "60"}
    assert service.get_effective_value("cache.ttl")["value"] == "60"

    service.delete_from_volatile("cache.ttl")

    assert volatile_store.data == {}


def test_volatile_write_failure_is_reported(service, volatile_store):
    volatile_store.unavailable = True

    with pytest.raises(PersistenceError) as exc_info:
        service.save_to_volatile("cache.ttl", "60")
    assert exc_info.value.key == "cache.ttl"

    with pytest.raises(PersistenceError):
        service.delete_from_volatile("cache.ttl")


def test_values_by_category(service, volatile_store):
    volatile_store.set("config:cache:ttl", "60")
    service.save_override("cache.size", "100")

    assert service.values_by_category("cache") == {"cache.size": "100", "cache:ttl": "60"}
