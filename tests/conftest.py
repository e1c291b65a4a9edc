"""Shared pytest fixtures for the text2gds test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

# ---------------------------------------------------------------------------
# CSV fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing its lines to ``input.csv`` under tmp_path."""

    def _write(*lines: str, name: str = "input.csv") -> Path:
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines))
        return path

    return _write


@pytest.fixture()
def output_path(tmp_path: Path) -> Path:
    return tmp_path / "out.gds"
