"""Interactive triage of candidate transactions.

The loop pops one candidate at a time, finds its near-duplicates among the
remaining queue, asks the operator to keep (with a title and category) or
discard it, optionally applies the same decision to the whole cluster, and
checkpoints the remaining queue before asking whether to stop.

State for one run lives on :class:`TriageSession`; nothing is module-global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from rich.console import Console

from .logging_setup import get_logger
from .models import CATEGORIES, DEFAULT_CATEGORY, Transaction
from .persistence import (
    append_discarded,
    append_output,
    finalize_on_exit,
    load_candidates,
    persist_queue,
)
from .similarity import find_similar
from .term_ui import (
    Prompter,
    render_done,
    render_entry,
    render_remaining,
    render_separator,
)
from .workbook import OutputWorkbook, read_input_rows

logger = get_logger(__name__)


@dataclass(slots=True)
class TriageSession:
    """One run: the open output workbook and the in-memory candidate queue."""

    book: OutputWorkbook
    output_path: Path
    original_length: int
    queue: list[Transaction] = field(default_factory=list)
    finalized: int = 0
    discarded: int = 0


@dataclass(frozen=True, slots=True)
class TriageSummary:
    finalized: int
    discarded: int
    remaining: int


def start_session(
    input_path: str | PathLike[str], output_path: str | PathLike[str]
) -> TriageSession:
    """Read the input, create the output workbook and seed the queue."""
    out = Path(output_path)
    logger.info("reading input file %s", input_path)
    rows = read_input_rows(input_path)
    logger.info("creating output file %s", out)
    book = OutputWorkbook.create(out)
    queue = load_candidates(book, rows)
    return TriageSession(book=book, output_path=out, original_length=len(queue), queue=queue)


def _split_cluster(
    current: Transaction, rest: list[Transaction]
) -> tuple[list[Transaction], list[Transaction]]:
    """Partition ``rest`` into (cluster, others), keeping each row in queue order."""
    cluster = find_similar(current, rest)
    picked = {id(tx) for tx in cluster}
    others = [tx for tx in rest if id(tx) not in picked]
    return cluster, others


def triage_step(session: TriageSession, prompter: Prompter, console: Console) -> bool:
    """Run one iteration of the loop; return True when the operator asked to stop."""

    render_remaining(console, len(session.queue))

    current, rest = session.queue[0], session.queue[1:]
    cluster, others = _split_cluster(current, rest)
    render_entry(console, current, cluster)

    applied_to_cluster = False
    if prompter.confirm("Do you want to add this entry?", default=False):
        title = prompter.text("What is the name of this entry?")
        category = prompter.select(
            "What is the type of this record?", CATEGORIES, default=DEFAULT_CATEGORY
        )
        append_output(session.book, current, title, category)
        session.finalized += 1
        if cluster and prompter.confirm(
            f"Do you want to add the {len(cluster)} similar entries found?", default=False
        ):
            for tx in cluster:
                append_output(session.book, tx, title, category)
            session.finalized += len(cluster)
            applied_to_cluster = True
    else:
        append_discarded(session.book, current)
        session.discarded += 1
        if cluster and prompter.confirm(
            f"Do you want to remove the {len(cluster)} similar entries found?", default=False
        ):
            for tx in cluster:
                append_discarded(session.book, tx)
            session.discarded += len(cluster)
            applied_to_cluster = True

    session.queue = others if applied_to_cluster else rest
    persist_queue(session.book, session.queue)
    logger.debug(
        "step done: cluster=%d applied=%s remaining=%d",
        len(cluster),
        applied_to_cluster,
        len(session.queue),
    )

    render_separator(console)
    return prompter.confirm("Do you want to terminate?", default=False)


def run_triage(
    session: TriageSession, prompter: Prompter, console: Console | None = None
) -> TriageSummary:
    """Drive :func:`triage_step` until the queue is empty or the operator stops.

    On exit the unresolved rows are restored to source order and the
    Finalized sheet is sorted; prompt or I/O errors propagate untouched and
    leave the last checkpoint on disk.
    """
    console = console or Console()

    while session.queue:
        if triage_step(session, prompter, console):
            logger.info("terminated by operator with %d candidate(s) left", len(session.queue))
            break

    console.print()
    finalize_on_exit(session.book, session.queue, session.original_length)
    render_done(console)
    return TriageSummary(
        finalized=session.finalized,
        discarded=session.discarded,
        remaining=len(session.queue),
    )


__all__ = ["TriageSession", "TriageSummary", "start_session", "triage_step", "run_triage"]
