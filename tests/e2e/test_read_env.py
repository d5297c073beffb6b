"""End-to-end load scenarios through the public entry points.

These exercise :func:`read_env` and :class:`EnvLoader` exactly as applications
call them: a dataclass instance, an environment mapping, optional converters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_typed_env import (
    ConversionError,
    EnvironSource,
    EnvLoader,
    IndexOutOfBoundsError,
    MaxDepthExceeded,
    RecursiveTypeError,
    UInt16,
    UsageError,
    basic_converters,
    embedded,
    noexpand,
    read_env,
)
from tests.support import Left, Node, Service, Settings, create_dotenv_sandbox, split_commas


@dataclass
class Simple:
    name: str = ""
    retries: int = 0


@dataclass
class Items:
    items: list[str] = noexpand(default_factory=list)


@dataclass
class Cache:
    cache: dict[str, int] = field(default_factory=dict)


@dataclass
class Window:
    bounds: tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class FrozenSettings:
    name: str = ""


@dataclass
class Database:
    host: str = "localhost"
    port: UInt16 = UInt16(5432)


@dataclass
class Application:
    database: Database = embedded(default_factory=Database)
    started: Optional[datetime] = None
    poll: timedelta = timedelta(seconds=30)
    replicas: list[Database] = field(default_factory=list)


def test_prefixed_scalars() -> None:
    result = read_env(Simple(), prefix="APP", environ={"APP_NAME": "svc", "APP_RETRIES": "3"})
    assert result == Simple(name="svc", retries=3)


def test_load_returns_the_same_instance() -> None:
    target = Simple()
    assert read_env(target, environ={"NAME": "svc"}) is target
    assert target.name == "svc"


def test_unset_fields_keep_their_defaults() -> None:
    result = read_env(Simple(name="default", retries=2), environ={"RETRIES": "9"})
    assert result == Simple(name="default", retries=9)


def test_noexpand_with_custom_converter() -> None:
    converters = basic_converters()
    converters[list[str]] = split_commas
    assert read_env(Items(), converters=converters, environ={"ITEMS": "a,b,c"}).items == ["a", "b", "c"]


def test_map_keys_come_back_lowercased() -> None:
    assert read_env(Cache(), environ={"CACHE_FOO": "1", "CACHE_BAR": "2"}).cache == {"foo": 1, "bar": 2}


def test_self_reference_fails_every_time() -> None:
    for _ in range(2):
        with pytest.raises(RecursiveTypeError):
            read_env(Node(), environ={})


def test_mutual_recursion_fails_on_depth() -> None:
    with pytest.raises(MaxDepthExceeded):
        read_env(Left(), environ={})


def test_sequence_order_ignores_source_order() -> None:
    environ = {"PORTS_2": "30", "PORTS_0": "10", "PORTS_1": "20"}
    assert read_env(Settings(), environ=environ).ports == [10, 20, 30]


def test_out_of_bounds_fixed_sequence_leaves_target_untouched() -> None:
    target = Window(bounds=(1, 2))
    with pytest.raises(IndexOutOfBoundsError):
        read_env(target, environ={"BOUNDS_0": "5", "BOUNDS_2": "9"})
    assert target == Window(bounds=(1, 2))


def test_embedded_fields_and_rich_scalars() -> None:
    environ = {
        "SVC_HOST": "db.internal",
        "SVC_PORT": "6432",
        "SVC_STARTED": "2024-05-01T08:00:00Z",
        "SVC_POLL": "1m30s",
        "SVC_REPLICAS_0_HOST": "replica-a",
    }
    result = read_env(Application(), prefix="SVC", environ=environ)
    assert result.database == Database(host="db.internal", port=6432)
    assert result.started == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)
    assert result.poll == timedelta(seconds=90)
    assert result.replicas == [Database(host="replica-a")]


def test_conversion_errors_surface() -> None:
    with pytest.raises(ConversionError):
        read_env(Application(), environ={"PORT": "70000"})


@pytest.mark.parametrize("target", [Simple, FrozenSettings(), {"name": ""}, None])
def test_invalid_targets_are_rejected(target) -> None:
    with pytest.raises(UsageError):
        read_env(target, environ={"NAME": "svc"})


def test_loader_is_reusable_across_sources() -> None:
    loader = EnvLoader("APP", max_depth=4)
    first = loader.load(Simple(), source=EnvironSource(environ={"APP_NAME": "one"}))
    second = loader.load(Simple(), source=EnvironSource(environ={"APP_NAME": "two"}))
    assert (first.name, second.name) == ("one", "two")


def test_loader_rejects_non_positive_depth() -> None:
    with pytest.raises(UsageError):
        EnvLoader(max_depth=0)


def test_depth_beyond_interpreter_stack_reports_max_depth() -> None:
    """Mutual recursion under a huge depth limit still fails inside the error taxonomy."""

    with pytest.raises(MaxDepthExceeded):
        EnvLoader(max_depth=100_000).load(Left(), source=EnvironSource(environ={}))


def test_custom_separator() -> None:
    environ = {"APP__SERVICE__MAX__RETRIES": "4", "APP_SERVICE_MAX_RETRIES": "1"}
    assert read_env(Settings(), prefix="APP", separator="__", environ=environ).service.max_retries == 4


def test_discover_previews_without_mutating() -> None:
    loader = EnvLoader("APP")
    values = loader.discover(Settings, EnvironSource(environ={"APP_SERVICE_NAME": "svc"}))
    assert [value.path for value in values] == [("service", "name")]


def test_dotenv_fills_gaps_below_environment(tmp_path: Path) -> None:
    sandbox = create_dotenv_sandbox(tmp_path)
    sandbox.write_dotenv("APP_NAME=from-file\nAPP_RETRIES=7\n")
    result = read_env(
        Simple(),
        prefix="APP",
        environ={"APP_NAME": "from-env"},
        dotenv=True,
        start_dir=str(sandbox.start_dir),
    )
    assert result == Simple(name="from-env", retries=7)


def test_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("LTE_TEST_SERVICE_NAME", "from-process")
    assert read_env(Service(), prefix="LTE_TEST_SERVICE").name == "from-process"


PORT_VALUES = st.lists(st.integers(min_value=0, max_value=65535), max_size=6)


@given(PORT_VALUES)
def test_loading_twice_is_idempotent(ports: list[int]) -> None:
    environ = {f"PORTS_{index}": str(port) for index, port in enumerate(ports)}
    environ["SERVICE_NAME"] = "svc"
    once = read_env(Settings(), environ=environ)
    twice = read_env(read_env(Settings(), environ=environ), environ=environ)
    assert once == twice
    assert once.ports == ports


@given(st.dictionaries(st.from_regex(r"[A-Z]{1,6}", fullmatch=True), st.integers(-1000, 1000), max_size=5))
def test_map_round_trip(entries: dict[str, int]) -> None:
    environ = {f"CACHE_{key}": str(value) for key, value in entries.items()}
    assert read_env(Cache(), environ=environ).cache == {key.lower(): value for key, value in entries.items()}


@dataclass
class Codes:
    codes: dict[int, str] = field(default_factory=dict)
    port: int = 0


def test_zero_padded_integers_parse_like_octal_literals() -> None:
    result = read_env(Codes(), environ={"CODES_01": "a", "CODES_10": "b", "PORT": "010"})
    assert result.codes == {1: "a", 10: "b"}
    assert result.port == 8
