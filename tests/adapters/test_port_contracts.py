"""Adapter contract tests for the application-layer ports.

The default adapters must keep satisfying the protocols in
``lib_config_vault.application.ports`` so the factory can accept any
implementation with the same shape.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_config_vault.adapters.file_formats.structured import JSONFileAdapter
from lib_config_vault.adapters.file_formats.toml_format import TOMLFileAdapter
from lib_config_vault.adapters.file_formats.yaml_format import YAMLFileAdapter
from lib_config_vault.adapters.resources.bundled import BundledResources
from lib_config_vault.adapters.types.builtin import BoolAdapter, FloatAdapter, IntAdapter, StrAdapter
from lib_config_vault.application import ports


@pytest.mark.parametrize("adapter_cls", [JSONFileAdapter, TOMLFileAdapter, YAMLFileAdapter])
def test_file_adapter_contract(adapter_cls: type) -> None:
    adapter = adapter_cls()
    assert isinstance(adapter, ports.FileAdapter)
    text = adapter.update_value("", "service.timeout", 30)
    assert adapter.read(text) == {"service": {"timeout": 30}}
    assert adapter.read(adapter.update_value(text, "service.timeout", None)) == {"service": {}}


@pytest.mark.parametrize("adapter_cls", [IntAdapter, FloatAdapter, BoolAdapter, StrAdapter])
def test_type_adapter_contract(adapter_cls: type) -> None:
    adapter = adapter_cls()
    assert isinstance(adapter, ports.TypeAdapter)
    if adapter_cls is not StrAdapter:
        assert adapter.from_raw(None, "path", object()) is None


def test_bundled_resources_contract(tmp_path: Path) -> None:
    assert isinstance(BundledResources(tmp_path), ports.ResourceSeeder)
