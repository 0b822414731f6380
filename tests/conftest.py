"""Shared fixtures: fake virtual environments and a canned version probe."""

from pathlib import Path
from typing import Callable, Sequence

import pytest

from enva.errors import InvocationError


class FakeProbe:
    """Stand-in for ``VersionProbe`` that never spawns a process.

    Each response may be a string (returned) or an exception (raised).
    Calls are recorded in ``calls``.
    """

    def __init__(
        self,
        python: str | Exception = "Python 3.11.4\n",
        pip: str | Exception = "pip 23.2.1 from /venv/lib/python3.11/site-packages/pip (python 3.11)\n",
        freeze: str | Exception = "",
    ):
        self.python = python
        self.pip = pip
        self.freeze = freeze
        self.calls: list[list[str]] = []

    def run(self, args: Sequence[str]) -> str:
        args = list(args)
        self.calls.append(args)
        if "list" in args:
            response = self.freeze
        elif Path(args[0]).name.startswith("python") and "-m" not in args:
            response = self.python
        else:
            response = self.pip
        if isinstance(response, Exception):
            raise response
        return response


def _touch(path: Path, executable: bool = False) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    if executable:
        path.chmod(0o755)


@pytest.fixture
def make_venv(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a POSIX-style venv layout under ``tmp_path``."""

    def _make(name: str = "venv", pip: bool = True, python: bool = True, parent: Path | None = None) -> Path:
        root = (parent or tmp_path) / name
        root.mkdir(parents=True, exist_ok=True)
        (root / "pyvenv.cfg").write_text("home = /usr/bin\n")
        _touch(root / "bin" / "activate")
        if python:
            _touch(root / "bin" / "python", executable=True)
        if pip:
            _touch(root / "bin" / "pip", executable=True)
        return root

    return _make


@pytest.fixture
def venv_dir(make_venv: Callable[..., Path]) -> Path:
    return make_venv()


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def failing_probe() -> FakeProbe:
    err = InvocationError("boom")
    return FakeProbe(python=err, pip=err, freeze=err)


@pytest.fixture
def make_probe() -> type[FakeProbe]:
    """The ``FakeProbe`` class, for tests that need custom responses."""
    return FakeProbe
