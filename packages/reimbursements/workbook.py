"""Tabular store adapter backed by ``openpyxl``.

The output workbook is kept open for the whole run and saved to disk after
every mutation, so the file is always a checkpoint of the decisions made so
far. Reads return rows as plain lists of cell values with trailing empty
cells trimmed, which is what the schema acceptance rule counts.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from os import PathLike
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from .logging_setup import get_logger
from .models import SHEETS, SheetSchema

logger = get_logger(__name__)

EXCEL_SUFFIXES = frozenset({".xlsx", ".xlsm"})
CSV_SUFFIXES = frozenset({".csv"})
SUPPORTED_INPUT_SUFFIXES = EXCEL_SUFFIXES | CSV_SUFFIXES


class UnsupportedInputError(ValueError):
    """Raised when the input file type cannot be read."""


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def trim_row(values: Iterable[Any]) -> list[Any]:
    """Drop trailing empty cells (``None`` or ``""``) from a row."""
    cells = list(values)
    while cells and _is_empty(cells[-1]):
        cells.pop()
    return cells


def read_input_rows(path: str | PathLike[str]) -> list[list[Any]]:
    """Read the first sheet of an Excel workbook, or a CSV file, header-less.

    Every row is returned (trimmed); no filtering happens here.
    """

    p = Path(path)
    suffix = p.suffix.lower()
    if suffix in CSV_SUFFIXES:
        with p.open(encoding="utf-8-sig", newline="") as f:
            rows = [trim_row(r) for r in csv.reader(f)]
    elif suffix in EXCEL_SUFFIXES:
        wb = load_workbook(p, read_only=True, data_only=True)
        try:
            ws = wb.worksheets[0]
            rows = [trim_row(r) for r in ws.iter_rows(values_only=True)]
        finally:
            wb.close()
    else:
        raise UnsupportedInputError(
            f"Unsupported input type '{p.suffix}'. Expected one of: "
            + ", ".join(sorted(SUPPORTED_INPUT_SUFFIXES))
        )
    logger.debug("read %d raw rows from %s", len(rows), p)
    return rows


class OutputWorkbook:
    """The three-sheet output workbook (Candidates, Finalized, Discarded)."""

    def __init__(self, workbook: Workbook, path: Path) -> None:
        self._wb = workbook
        self.path = path

    @classmethod
    def create(cls, path: str | PathLike[str]) -> OutputWorkbook:
        """Create the workbook with its sheets in schema order and save it."""
        wb = Workbook()
        first, *rest = SHEETS
        wb.active.title = first.name
        for schema in rest:
            wb.create_sheet(schema.name)
        book = cls(wb, Path(path))
        book.save()
        logger.info("created output workbook %s", book.path)
        return book

    @classmethod
    def open(cls, path: str | PathLike[str]) -> OutputWorkbook:
        return cls(load_workbook(path), Path(path))

    @property
    def sheet_names(self) -> list[str]:
        return list(self._wb.sheetnames)

    def save(self) -> None:
        self._wb.save(self.path)

    def _sheet(self, schema: SheetSchema) -> Worksheet:
        return self._wb[schema.name]

    # ---- reads ---------------------------------------------------------

    def read_rows(self, schema: SheetSchema) -> list[list[Any]]:
        ws = self._sheet(schema)
        return [trim_row(r) for r in ws.iter_rows(values_only=True)]

    def row_count(self, schema: SheetSchema) -> int:
        """Index of the last row holding any non-empty cell (0 when none)."""
        last = 0
        for idx, row in enumerate(self._sheet(schema).iter_rows(values_only=True), start=1):
            if trim_row(row):
                last = idx
        return last

    # ---- writes --------------------------------------------------------

    def _write_at(self, ws: Worksheet, start_row: int, rows: Sequence[Sequence[Any]]) -> None:
        for r_off, row in enumerate(rows):
            for c_off, value in enumerate(row):
                ws.cell(row=start_row + r_off, column=1 + c_off).value = value

    def write_rows(
        self,
        schema: SheetSchema,
        rows: Sequence[Sequence[Any]],
        *,
        pad_to: int | None = None,
    ) -> None:
        """Overwrite ``schema``'s sheet from the first row and column.

        When ``pad_to`` exceeds ``len(rows)``, the rows in between are blanked
        (cells set empty, the sheet's row dimension is kept).
        """
        ws = self._sheet(schema)
        data: list[Sequence[Any]] = list(rows)
        if pad_to is not None and pad_to > len(data):
            blank = [None] * schema.width
            data.extend(blank for _ in range(pad_to - len(data)))
        self._write_at(ws, 1, data)
        self.save()

    def append_rows(self, schema: SheetSchema, rows: Sequence[Sequence[Any]]) -> None:
        """Write ``rows`` after the last used row of the sheet."""
        ws = self._sheet(schema)
        self._write_at(ws, self.row_count(schema) + 1, rows)
        self.save()


__all__ = [
    "OutputWorkbook",
    "UnsupportedInputError",
    "SUPPORTED_INPUT_SUFFIXES",
    "read_input_rows",
    "trim_row",
]
