"""Adapter contract tests for the default ports implementation.

Purpose
-------
Verify the key sources keep satisfying the ``KeySource`` protocol defined in
``src/lib_typed_env/application/ports.py`` and that the default converters
match the ``Converter`` shape, so dependency inversion stays enforceable.
"""

from __future__ import annotations

from pathlib import Path

from lib_typed_env import ChainedSource, DotEnvSource, EnvironSource, basic_converters
from lib_typed_env.application import ports
from tests.support import create_dotenv_sandbox


def test_environ_source_contract() -> None:
    source = EnvironSource(environ={"A": "1"})
    assert isinstance(source, ports.KeySource)
    assert list(source.keys()) == ["A"]


def test_dotenv_source_contract(tmp_path: Path) -> None:
    sandbox = create_dotenv_sandbox(tmp_path)
    sandbox.write_dotenv("A=1\n")
    source = DotEnvSource.discover(str(sandbox.start_dir))
    assert isinstance(source, ports.KeySource)
    assert source.lookup("A") == "1"


def test_chained_source_contract() -> None:
    assert isinstance(ChainedSource(EnvironSource(environ={}), DotEnvSource()), ports.KeySource)


def test_converters_accept_raw_strings() -> None:
    for converter in basic_converters().values():
        assert callable(converter)
    assert basic_converters()[str]("raw") == "raw"
