"""Shared fixtures: input workbooks on disk and a quiet rich console."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook
from rich.console import Console


@pytest.fixture
def write_input(tmp_path: Path) -> Callable[[Sequence[Sequence[Any]]], Path]:
    """Write header-less rows to the first sheet of a fresh ``.xlsx`` file."""

    def _write(rows: Sequence[Sequence[Any]], name: str = "statement.xlsx") -> Path:
        wb = Workbook()
        ws = wb.active
        for row in rows:
            ws.append(list(row))
        path = tmp_path / name
        wb.save(path)
        return path

    return _write


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep a developer's local log level out of test runs.
    monkeypatch.delenv("REIMBURSEMENTS_LOG_LEVEL", raising=False)
