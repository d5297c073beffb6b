"""Environment key source tests.

The source must behave as a snapshot: later changes to the environment do not
leak into a load that is already running.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from lib_typed_env import ChainedSource, EnvironSource, default_env_prefix


def test_default_env_prefix() -> None:
    """Slug values should become upper snake-case prefixes."""

    assert default_env_prefix("lib-typed-env") == "LIB_TYPED_ENV"


def test_environ_source_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("LIB_TYPED_ENV_PROBE", "42")
    source = EnvironSource()
    assert source.lookup("LIB_TYPED_ENV_PROBE") == "42"
    assert "LIB_TYPED_ENV_PROBE" in source.keys()


def test_environ_source_is_a_snapshot(monkeypatch) -> None:
    monkeypatch.setenv("LIB_TYPED_ENV_PROBE", "before")
    source = EnvironSource()
    monkeypatch.setenv("LIB_TYPED_ENV_PROBE", "after")
    monkeypatch.setenv("LIB_TYPED_ENV_LATE", "x")
    assert source.lookup("LIB_TYPED_ENV_PROBE") == "before"
    assert source.lookup("LIB_TYPED_ENV_LATE") is None


def test_injected_mapping_is_copied() -> None:
    environ = {"A": "1"}
    source = EnvironSource(environ=environ)
    environ["A"] = "2"
    assert source.lookup("A") == "1"
    assert len(source) == 1


def test_empty_value_is_present() -> None:
    """An empty string is a defined value, unlike a missing key."""

    source = EnvironSource(environ={"A": ""})
    assert source.lookup("A") == ""
    assert source.lookup("B") is None


def test_chained_source_precedence() -> None:
    chained = ChainedSource(EnvironSource(environ={"A": "env"}), EnvironSource(environ={"A": "file", "B": "file"}))
    assert chained.lookup("A") == "env"
    assert chained.lookup("B") == "file"
    assert chained.lookup("C") is None
    assert list(chained.keys()) == ["A", "B"]


KEYS = st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ_", min_size=1, max_size=8)


@given(st.dictionaries(KEYS, st.text(max_size=5), max_size=5), st.dictionaries(KEYS, st.text(max_size=5), max_size=5))
def test_chained_source_matches_dict_merge(first: dict[str, str], second: dict[str, str]) -> None:
    """Chaining behaves like a merge where the first mapping wins."""

    chained = ChainedSource(EnvironSource(environ=first), EnvironSource(environ=second))
    merged = {**second, **first}
    assert set(chained.keys()) == set(merged)
    for key, value in merged.items():
        assert chained.lookup(key) == value
