"""Shared fixtures for burnmine_core tests."""

import stat
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from burnmine_core.settings import reset_settings


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio backend for anyio tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Drop cached settings around every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fake_compiler(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing an executable shell script that stands in for the compiler."""
    counter = {"n": 0}

    def _make(body: str) -> Path:
        counter["n"] += 1
        script = tmp_path / f"burn-{counter['n']}"
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
