"""Data models, sheet schemas and row conversions for ``reimbursements``.

Sheet layouts are declared once as :class:`SheetSchema` values and shared by
the writers and by the row filter, so the "exactly N cells" acceptance rule is
derived from the schema width rather than repeated as a literal.

Sign convention
---------------
The bank export stores charges as positive amounts. Internally a reimbursable
cost is the inverse of the source value; :func:`transaction_from_row` inverts
exactly once on read and :func:`transaction_to_row` inverts exactly once on
write, so an unmodified record round-trips to its original sign.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """One candidate transaction loaded from the source sheet.

    ``date`` keeps the source text verbatim; ``cost`` uses the internal sign
    convention; ``id`` has quote characters removed and is kept only for
    record keeping (it is never used as a dedup key).
    """

    date: str
    name: str
    cost: float
    currency: str
    id: str


@dataclass(frozen=True, slots=True)
class OutputRecord:
    """A finalized reimbursement row: operator-supplied title and category."""

    date: str
    title: str
    category: str
    cost: float | str


# ---------------------------------------------------------------------------
# Sheet schemas
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SheetSchema:
    """Named, ordered column layout of one output sheet."""

    name: str
    fields: tuple[str, ...]

    @property
    def width(self) -> int:
        return len(self.fields)

    def accepts(self, cells: Sequence[Any]) -> bool:
        """Return True when ``cells`` has exactly this schema's width."""
        return len(cells) == self.width


TRANSACTION_FIELDS: tuple[str, ...] = ("date", "name", "cost", "currency", "blank", "id")

CANDIDATES = SheetSchema("Candidates", TRANSACTION_FIELDS)
FINALIZED = SheetSchema("Finalized", ("date", "title", "category", "cost"))
DISCARDED = SheetSchema("Discarded", TRANSACTION_FIELDS)

# Workbook order matters: Candidates, Finalized, Discarded.
SHEETS: tuple[SheetSchema, ...] = (CANDIDATES, FINALIZED, DISCARDED)

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

CATEGORIES: tuple[str, ...] = (
    "Team Meals",
    "Training Fees",
    "Office Supplies",
    "Software",
    "Telephones",
    "Travel",
    "Other",
    "Postage",
    "Stationery",
    "Subscriptions",
)
DEFAULT_CATEGORY = CATEGORIES[3]

# ---------------------------------------------------------------------------
# Cell coercion
# ---------------------------------------------------------------------------

SHEET_DATE_FORMAT = "%d/%m/%Y"
# Written in place of an empty id so the row keeps all six cells; reads back as "".
EMPTY_ID_CELL = "''"


def cell_text(value: Any) -> str:
    """Render a cell value as the text a spreadsheet would display."""
    if value is None:
        return ""
    if isinstance(value, datetime | date):
        return value.strftime(SHEET_DATE_FORMAT)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_amount(value: Any) -> float | None:
    """Parse a cost cell into a float.

    Tolerates thousands separators, a leading ``$`` and accounting-style
    parentheses. Returns ``None`` when the value is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if value is None:
        return None
    s = str(value).strip().replace(",", "")
    negative = False
    if s.startswith("(") and s.endswith(")") and len(s) >= 2:
        s = s[1:-1].strip()
        negative = True
    if s.startswith("$"):
        s = s[1:].strip()
    try:
        amount = float(s)
    except ValueError:
        return None
    return -amount if negative else amount


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def transaction_from_row(cells: Sequence[Any]) -> Transaction | None:
    """Build a :class:`Transaction` from a Candidates-shaped row.

    Returns ``None`` for rows that do not fit the schema (wrong cell count or
    a non-numeric cost); callers drop those silently.
    """
    if not CANDIDATES.accepts(cells):
        return None
    amount = parse_amount(cells[2])
    if amount is None:
        return None
    return Transaction(
        date=cell_text(cells[0]),
        name=cell_text(cells[1]),
        cost=-1 * amount,
        currency=cell_text(cells[3]),
        id=cell_text(cells[5]).replace("'", ""),
    )


def transaction_to_row(tx: Transaction) -> list[Any]:
    """Serialize ``tx`` in the source sign convention with a blank 5th column."""
    return [tx.date, tx.name, -1 * tx.cost, tx.currency, "", tx.id or EMPTY_ID_CELL]


def output_row(tx: Transaction, title: str, category: str) -> list[Any]:
    """Finalized sheet row; cost stays in the internal (positive) convention."""
    return [tx.date, title, category, tx.cost]


def output_record_from_row(cells: Sequence[Any]) -> OutputRecord | None:
    if not FINALIZED.accepts(cells):
        return None
    amount = parse_amount(cells[3])
    return OutputRecord(
        date=cell_text(cells[0]),
        title=cell_text(cells[1]),
        category=cell_text(cells[2]),
        cost=amount if amount is not None else cell_text(cells[3]),
    )


__all__ = [
    "Transaction",
    "OutputRecord",
    "SheetSchema",
    "CANDIDATES",
    "FINALIZED",
    "DISCARDED",
    "SHEETS",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "SHEET_DATE_FORMAT",
    "EMPTY_ID_CELL",
    "cell_text",
    "parse_amount",
    "transaction_from_row",
    "transaction_to_row",
    "output_row",
    "output_record_from_row",
]
