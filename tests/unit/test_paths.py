from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_config_vault.domain.errors import InvalidPath
from lib_config_vault.domain.paths import assign_path, join_path, remove_path, resolve_path, split_path

SEGMENT = st.from_regex(r"[a-z][a-z0-9_]{0,5}", fullmatch=True)
PATH = st.lists(SEGMENT, min_size=1, max_size=4).map(".".join)


def test_split_path_rejects_empty_segments() -> None:
    for bad in ("", "a..b", ".a", "a."):
        with pytest.raises(InvalidPath):
            split_path(bad)


def test_resolve_path_misses_through_scalars() -> None:
    tree = {"db": {"port": 5432}, "name": "demo"}
    assert resolve_path(tree, "db.port") == 5432
    assert resolve_path(tree, "db.host") is None
    assert resolve_path(tree, "name.first") is None


def test_assign_path_creates_and_overwrites_intermediates() -> None:
    tree: dict[str, object] = {"db": "sqlite"}
    assign_path(tree, "db.pool.size", 4)
    assign_path(tree, "service.timeout", 30)
    assert tree == {"db": {"pool": {"size": 4}}, "service": {"timeout": 30}}


def test_assign_none_removes_without_creating_parents() -> None:
    tree: dict[str, object] = {"db": {"port": 1}}
    assign_path(tree, "db.port", None)
    assign_path(tree, "missing.deep.key", None)
    assert tree == {"db": {}}


def test_remove_path_reports_outcome() -> None:
    tree: dict[str, object] = {"db": {"port": 1}}
    assert remove_path(tree, "db.port") is True
    assert remove_path(tree, "db.port") is False
    assert remove_path(tree, "db.port.deeper") is False


def test_join_path_skips_empty_segments() -> None:
    assert join_path("", "a", "", "b") == "a.b"


@given(PATH, st.integers())
def test_assign_then_resolve_returns_value(path: str, value: int) -> None:
    tree: dict[str, object] = {}
    assign_path(tree, path, value)
    assert resolve_path(tree, path) == value
    assert split_path(path) == path.split(".")
