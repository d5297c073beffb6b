"""Shared fixtures for the test-suite.

Purpose
-------
Provide the dataclass shapes reused across unit, adapter and end-to-end tests
plus a tiny sandbox that writes ``.env`` files, so individual tests only
describe the environment they feed in.

Contents
--------
* ``Service`` / ``Settings`` – representative nested configuration, also used
  as the ``load`` target of the CLI tests (``tests.support:Settings``).
* ``Node`` / ``Left`` / ``Right`` – self and mutually recursive shapes.
* :class:`DotEnvSandbox` / :func:`create_dotenv_sandbox` – nested directories
  with an optional ``.env`` file at the root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

from lib_typed_env import noexpand


@dataclass
class Service:
    name: str = ""
    max_retries: int = 0
    timeout: timedelta = timedelta(0)


@dataclass
class Settings:
    debug: bool = False
    service: Service = field(default_factory=Service)
    ports: list[int] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    tags: list[str] = noexpand(default_factory=list)


@dataclass
class Node:
    value: int = 0
    next: Optional[Node] = None


@dataclass
class Left:
    right: Optional[Right] = None


@dataclass
class Right:
    left: Optional[Left] = None


def split_commas(raw: str) -> list[str]:
    """Converter used for ``noexpand`` list fields."""

    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(slots=True)
class DotEnvSandbox:
    """Directory tree whose root may hold a ``.env`` file."""

    root: Path
    start_dir: Path

    def write_dotenv(self, body: str) -> Path:
        target = self.root / ".env"
        target.write_text(body, encoding="utf-8")
        return target


def create_dotenv_sandbox(tmp_path: Path) -> DotEnvSandbox:
    """Return a sandbox with a three-level deep start directory below *tmp_path*."""

    start_dir = tmp_path / "project" / "src" / "pkg"
    start_dir.mkdir(parents=True)
    return DotEnvSandbox(root=tmp_path / "project", start_dir=start_dir)
