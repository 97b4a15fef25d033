"""Unit tests for the path-addressed store and its section views."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

import pytest

from lib_config_vault import Config, ConfigFactory, ConfigSection, ConversionError, InvalidPath


class DurationAdapter:
    """Store durations as seconds."""

    def from_raw(self, root: Config, path: str, raw: Any) -> timedelta | None:
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return timedelta(seconds=raw)
        return None

    def to_raw(self, root: Config, path: str, value: timedelta) -> Any:
        return value.total_seconds()


class StrictAdapter:
    """Decline loudly so the store has to fold the error into a miss."""

    def from_raw(self, root: Config, path: str, raw: Any) -> complex | None:
        raise ConversionError(f"{raw!r} is not complex")

    def to_raw(self, root: Config, path: str, value: complex) -> Any:
        return str(value)


class BrokenAdapter:
    def from_raw(self, root: Config, path: str, raw: Any) -> bytes | None:
        raise RuntimeError("adapter bug")

    def to_raw(self, root: Config, path: str, value: bytes) -> Any:
        return value


@pytest.fixture()
def factory(tmp_path: Path) -> ConfigFactory:
    return ConfigFactory(tmp_path)


@pytest.fixture()
def config(factory: ConfigFactory) -> Config:
    return factory.create("app.toml")


def test_typed_read_converts_numeric_strings(config: Config) -> None:
    config.set("database.port", "5432")
    assert config.get_optional("database.port", int) == 5432
    assert config.get_optional("database.port", float) == 5432.0
    assert config.get_optional("database.port", str) == "5432"


def test_typed_read_misses_for_unconvertible_values(config: Config) -> None:
    config.set("database.port", "not-a-port")
    config.set("database.enabled", True)
    assert config.get_optional("database.port", int) is None
    assert config.get_optional("database", int) is None
    assert config.get_optional("database.enabled", int) is None
    assert config.get_optional("database.enabled", bool) is True


def test_untyped_read_returns_raw_value(config: Config) -> None:
    config.set("service.hosts", ["a", "b"])
    assert config.get("service.hosts") == ["a", "b"]
    assert config.get_optional("service.hosts", list) == ["a", "b"]
    assert config.get_optional("service.hosts", dict) is None


def test_get_falls_back_to_default(config: Config) -> None:
    assert config.get("missing.path", int, default=3) == 3
    assert config.get("missing.path") is None


def test_set_none_removes_value(config: Config) -> None:
    config.set("service.timeout", 30)
    config.set("service.timeout", None)
    assert config.contains("service.timeout") is False
    assert config.get("service") == {}


def test_remove_of_absent_path_creates_nothing(config: Config) -> None:
    config.remove("ghost.key")
    assert "ghost" not in config


def test_set_replaces_intermediate_scalar(config: Config) -> None:
    config.set("database", "sqlite")
    config.set("database.port", 5432)
    assert config.get("database") == {"port": 5432}


def test_malformed_paths_raise_on_write_and_miss_on_read(config: Config) -> None:
    with pytest.raises(InvalidPath):
        config.set("a..b", 1)
    assert config.get_optional("a..b") is None
    assert config.contains("a..b") is False


def test_custom_type_adapter_round_trip(factory: ConfigFactory, config: Config) -> None:
    factory.register_type_adapter(DurationAdapter(), timedelta)
    config.set("service.timeout", timedelta(seconds=5))
    assert config.get("service.timeout") == 5.0
    assert config.get_optional("service.timeout", timedelta) == timedelta(seconds=5)


def test_type_lookup_is_exact(factory: ConfigFactory, config: Config) -> None:
    class Port(int):
        pass

    config.set("port", Port(80))
    assert config.get_optional("port", Port) == 80
    config.set("name", "web")
    assert config.get_optional("name", Port) is None


def test_conversion_error_is_a_miss(
    factory: ConfigFactory, config: Config, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_config_vault")
    factory.register_type_adapter(StrictAdapter(), complex)
    config.set("value", "1+2j")
    assert config.get_optional("value", complex) is None
    record = next(record for record in caplog.records if record.getMessage() == "type_conversion_declined")
    assert getattr(record, "context")["path"] == "value"


def test_any_adapter_error_is_a_miss(
    factory: ConfigFactory, config: Config, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_config_vault")
    factory.register_type_adapter(BrokenAdapter(), bytes)
    config.set("blob", "abc")
    config.set("blobs", ["abc", "def"])
    assert config.get_optional("blob", bytes) is None
    assert config.get("blob", bytes, default=b"") == b""
    assert config.field("blob", bytes).get_optional() is None
    assert config.field_list("blobs", bytes).get() is None
    record = next(record for record in caplog.records if record.getMessage() == "type_conversion_declined")
    assert getattr(record, "context")["error_type"] == "RuntimeError"


def test_contains_never_raises(factory: ConfigFactory, config: Config) -> None:
    factory.register_type_adapter(BrokenAdapter(), object)
    config.set("blob", "abc")
    assert config.contains("blob") is False


def test_config_is_a_read_only_mapping(config: Config) -> None:
    config.set("service.name", "demo")
    config.set("debug", False)
    assert "service" in config
    assert len(config) == 2
    assert dict(config)["debug"] is False
    assert config["service"] == {"name": "demo"}


def test_as_dict_returns_deep_copy(config: Config) -> None:
    config.set("service.name", "demo")
    clone = config.as_dict()
    clone["service"]["name"] = "other"
    assert config.get("service.name") == "demo"


def test_to_json_serialises_tree(config: Config) -> None:
    config.set("service.ports", [80, 443])
    assert json.loads(config.to_json()) == {"service": {"ports": [80, 443]}}
    assert "\n" in config.to_json(indent=2)


def test_section_prefixes_paths(config: Config) -> None:
    database = config.section("database")
    database.set("port", 5432)
    database.section("pool").set("size", 4)
    assert isinstance(database, ConfigSection)
    assert config.get("database.port") == 5432
    assert config.get("database.pool.size") == 4
    assert database.get("pool.size", int) == 4
    assert database.contains("port") is True
    database.remove("port")
    assert config.contains("database.port") is False


def test_section_value_exists_and_replace(config: Config) -> None:
    section = config.section("cache")
    assert section.exists() is False
    assert section.value() is None
    section.replace({"ttl": 60})
    assert section.value() == {"ttl": 60}
    assert section.as_dict() == {"ttl": 60}
    section.replace(None)
    assert config.contains("cache") is False


def test_section_value_is_live(config: Config) -> None:
    config.set("cache.ttl", 60)
    live = config.section("cache").value()
    assert live is not None
    live["ttl"] = 120
    assert config.get("cache.ttl") == 120


def test_root_section_targets_whole_tree(config: Config) -> None:
    root = config.section("")
    root.set("name", "demo")
    assert root.value() is config.data
    assert root.get("name") == "demo"


def test_section_over_scalar_does_not_exist(config: Config) -> None:
    config.set("cache", 5)
    assert config.section("cache").exists() is False
    assert config.section("cache").as_dict() == {}


def test_field_views_share_the_store(config: Config) -> None:
    port = config.section("database").field("port", int)
    port.set(5432)
    assert config.field("database.port", int).get() == 5432
    assert port.path == "database.port"
