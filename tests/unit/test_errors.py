from __future__ import annotations

import pytest

from lib_config_vault import ConfigLoadError, ConfigSaveError
from lib_config_vault.domain.errors import (
    ConfigError,
    ConversionError,
    InvalidFormat,
    InvalidPath,
    NotFound,
    NotLoaded,
    UnsupportedFormat,
)


@pytest.mark.parametrize(
    "error_cls",
    [InvalidFormat, InvalidPath, ConversionError, NotFound, NotLoaded, UnsupportedFormat, ConfigLoadError, ConfigSaveError],
)
def test_error_hierarchy(error_cls: type[Exception]) -> None:
    assert issubclass(error_cls, ConfigError)
    assert isinstance(error_cls("boom"), ConfigError)
