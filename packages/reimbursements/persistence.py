"""Checkpoint writes for the triage loop.

Every function here writes through :class:`~reimbursements.workbook.OutputWorkbook`,
which saves the file after each mutation. Scope:

- seed the Candidates sheet from the input rows and build the queue;
- rewrite the Candidates sheet from the remaining queue after each decision;
- append finalized and discarded rows;
- on exit, restore the source order of unresolved rows and sort the
  Finalized sheet by date (newest first).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from .logging_setup import get_logger
from .models import (
    CANDIDATES,
    DISCARDED,
    FINALIZED,
    SHEET_DATE_FORMAT,
    OutputRecord,
    Transaction,
    output_record_from_row,
    output_row,
    transaction_from_row,
    transaction_to_row,
)
from .workbook import OutputWorkbook

logger = get_logger(__name__)

# Prefixed to every date cell re-written by the sort step.
SORTED_DATE_MARKER = "x"


def accept_candidate_rows(rows: Sequence[Sequence[Any]]) -> list[Transaction]:
    """Convert conforming rows to transactions, silently dropping the rest."""
    accepted: list[Transaction] = []
    for row in rows:
        tx = transaction_from_row(row)
        if tx is not None:
            accepted.append(tx)
    dropped = len(rows) - len(accepted)
    if dropped:
        logger.debug("dropped %d non-conforming row(s)", dropped)
    return accepted


def load_candidates(book: OutputWorkbook, input_rows: Sequence[Sequence[Any]]) -> list[Transaction]:
    """Seed the Candidates sheet and return the initial queue (source order reversed)."""
    queue = list(reversed(accept_candidate_rows(input_rows)))
    book.write_rows(CANDIDATES, [transaction_to_row(tx) for tx in queue])
    logger.info("loaded %d candidate(s)", len(queue))
    return queue


def persist_queue(book: OutputWorkbook, queue: Sequence[Transaction]) -> None:
    """Rewrite the Candidates sheet to hold exactly ``queue``.

    Stale rows below the new content are blanked, never removed.
    """
    book.write_rows(
        CANDIDATES,
        [transaction_to_row(tx) for tx in queue],
        pad_to=book.row_count(CANDIDATES),
    )


def append_output(book: OutputWorkbook, tx: Transaction, title: str, category: str) -> None:
    book.append_rows(FINALIZED, [output_row(tx, title, category)])
    logger.debug("finalized %s as %r/%s", tx.id, title, category)


def append_discarded(book: OutputWorkbook, tx: Transaction) -> None:
    book.append_rows(DISCARDED, [transaction_to_row(tx)])
    logger.debug("discarded %s", tx.id)


def restore_candidates_order(
    book: OutputWorkbook, queue: Sequence[Transaction], original_length: int
) -> None:
    """Write the unresolved queue back in source order, sized to ``original_length``.

    Rows past ``original_length`` are cut; missing rows are written blank.
    """
    rows = [transaction_to_row(tx) for tx in reversed(queue)][:original_length]
    book.write_rows(CANDIDATES, rows, pad_to=original_length)


def parse_sheet_date(text: str) -> datetime | None:
    """Parse a ``day/month/year`` date cell, ignoring a leading sort marker."""
    s = text.strip()
    if s.startswith(SORTED_DATE_MARKER):
        s = s[len(SORTED_DATE_MARKER) :]
    try:
        return datetime.strptime(s, SHEET_DATE_FORMAT)
    except ValueError:
        return None


def mark_date(text: str) -> str:
    if text.startswith(SORTED_DATE_MARKER):
        return text
    return f"{SORTED_DATE_MARKER}{text}"


def _sort_key(record: OutputRecord) -> datetime:
    # Unparsable dates sort last under a descending sort.
    return parse_sheet_date(record.date) or datetime.min


def sort_finalized_sheet(book: OutputWorkbook) -> list[OutputRecord]:
    """Re-read Finalized, sort newest first, and rewrite with marked dates.

    Only rows matching the Finalized schema width take part; any other row is
    dropped and its cells blanked.
    """
    before = book.row_count(FINALIZED)
    records = [
        rec
        for rec in (output_record_from_row(row) for row in book.read_rows(FINALIZED))
        if rec is not None
    ]
    records.sort(key=_sort_key, reverse=True)
    book.write_rows(
        FINALIZED,
        [[mark_date(r.date), r.title, r.category, r.cost] for r in records],
        pad_to=before,
    )
    logger.info("sorted %d finalized row(s)", len(records))
    return records


def finalize_on_exit(
    book: OutputWorkbook, queue: Sequence[Transaction], original_length: int
) -> None:
    restore_candidates_order(book, queue, original_length)
    sort_finalized_sheet(book)


__all__ = [
    "SORTED_DATE_MARKER",
    "accept_candidate_rows",
    "load_candidates",
    "persist_queue",
    "append_output",
    "append_discarded",
    "restore_candidates_order",
    "parse_sheet_date",
    "mark_date",
    "sort_finalized_sheet",
    "finalize_on_exit",
]
