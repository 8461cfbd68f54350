from pathlib import Path

import pytest

from reimbursements.models import CANDIDATES, DISCARDED, FINALIZED, Transaction
from reimbursements.persistence import (
    SORTED_DATE_MARKER,
    accept_candidate_rows,
    append_discarded,
    append_output,
    finalize_on_exit,
    load_candidates,
    parse_sheet_date,
    persist_queue,
    restore_candidates_order,
    sort_finalized_sheet,
)
from reimbursements.workbook import OutputWorkbook, read_input_rows

SCENARIO_ROWS = [
    ["01/01/2023", "Coffee Shop", "12.50", "AED", "", "'123'"],
    ["02/01/2023", "Coffee Shop Express", "11.00", "AED", "", "'124'"],
]


def tx(name: str, id_: str, cost: float = -10.0, date: str = "01/01/2023") -> Transaction:
    return Transaction(date=date, name=name, cost=cost, currency="AED", id=id_)


@pytest.fixture
def book(tmp_path: Path) -> OutputWorkbook:
    return OutputWorkbook.create(tmp_path / "out.xlsx")


def conforming(book: OutputWorkbook, schema=CANDIDATES) -> list[Transaction]:
    return accept_candidate_rows(book.read_rows(schema))


def test_create_writes_three_sheets_in_order(tmp_path: Path, book: OutputWorkbook):
    assert (tmp_path / "out.xlsx").exists()
    reopened = OutputWorkbook.open(tmp_path / "out.xlsx")
    assert reopened.sheet_names == ["Candidates", "Finalized", "Discarded"]
    assert reopened.row_count(CANDIDATES) == 0


def test_load_candidates_scenario(book: OutputWorkbook):
    queue = load_candidates(book, SCENARIO_ROWS)
    assert [t.id for t in queue] == ["124", "123"]
    assert [t.cost for t in queue] == [-11.00, -12.50]
    # Candidates sheet mirrors the queue in the source sign convention
    rows = book.read_rows(CANDIDATES)
    assert rows[0] == ["02/01/2023", "Coffee Shop Express", 11.0, "AED", "", "124"]


def test_load_candidates_drops_non_conforming_rows(book: OutputWorkbook):
    rows = [
        ["Date", "Description", "Amount", "Currency", "", "Reference"],
        ["Statement for account 1234"],
        *SCENARIO_ROWS,
        ["03/01/2023", "Too", "1.00", "AED", "", "'9'", "wide"],
    ]
    queue = load_candidates(book, rows)
    assert [t.id for t in queue] == ["124", "123"]


def test_read_input_rows_from_xlsx(write_input):
    path = write_input(SCENARIO_ROWS + [[None, None], []])
    rows = read_input_rows(path)
    # Blank 5th column reads back empty; trailing blanks are trimmed.
    assert rows[0][:4] == ["01/01/2023", "Coffee Shop", "12.50", "AED"]
    assert len(rows[0]) == 6
    assert [len(r) for r in rows[2:]] == [0] * len(rows[2:])
    assert [t.id for t in accept_candidate_rows(rows)] == ["123", "124"]


def test_read_input_rows_from_csv(tmp_path: Path):
    path = tmp_path / "statement.csv"
    path.write_text(
        "01/01/2023,Coffee Shop,12.50,AED,,'123'\n"
        "02/01/2023,Coffee Shop Express,\"1,100.00\",AED,,'124'\n"
        "\n",
        encoding="utf-8",
    )
    txs = accept_candidate_rows(read_input_rows(path))
    assert [t.cost for t in txs] == [-12.5, -1100.0]


def test_read_input_rows_rejects_unknown_type(tmp_path: Path):
    from reimbursements.workbook import UnsupportedInputError

    path = tmp_path / "statement.ods"
    path.write_bytes(b"")
    with pytest.raises(UnsupportedInputError):
        read_input_rows(path)


def test_persist_queue_round_trips_exact_queue(tmp_path: Path, book: OutputWorkbook):
    queue = [tx("Careem", "1", -12.5), tx("Noon", "2", 3.0), tx("Zoom", "3", -0.99)]
    persist_queue(book, queue)
    assert conforming(book) == queue
    # Re-reading from disk yields the same queue
    assert conforming(OutputWorkbook.open(tmp_path / "out.xlsx")) == queue


def test_persist_queue_keeps_transaction_with_empty_id(tmp_path: Path, book: OutputWorkbook):
    queue = [tx("Coffee Shop", ""), tx("Noon", "2")]
    persist_queue(book, queue)
    assert conforming(book) == queue
    assert conforming(OutputWorkbook.open(tmp_path / "out.xlsx")) == queue


def test_quote_only_id_survives_restore_on_exit(tmp_path: Path, book: OutputWorkbook):
    queue = load_candidates(book, [["01/01/2023", "Coffee Shop", "12.50", "AED", "", "''"]])
    assert [t.id for t in queue] == [""]
    restore_candidates_order(book, queue, original_length=1)
    assert conforming(OutputWorkbook.open(tmp_path / "out.xlsx")) == queue


def test_persist_queue_blanks_stale_rows_without_truncating(book: OutputWorkbook):
    queue = [tx("Careem", "1"), tx("Noon", "2"), tx("Zoom", "3")]
    persist_queue(book, queue)
    persist_queue(book, queue[2:])
    rows = book.read_rows(CANDIDATES)
    assert len(rows) >= 3
    assert rows[1:3] == [[], []]
    assert book.row_count(CANDIDATES) == 1
    assert conforming(book) == queue[2:]


def test_persist_queue_is_idempotent(tmp_path: Path, book: OutputWorkbook):
    queue = [tx("Careem", "1"), tx("Noon", "2")]
    persist_queue(book, [tx("Old", "0"), *queue, tx("Older", "9")])
    persist_queue(book, queue)
    first = OutputWorkbook.open(tmp_path / "out.xlsx").read_rows(CANDIDATES)
    persist_queue(book, queue)
    second = OutputWorkbook.open(tmp_path / "out.xlsx").read_rows(CANDIDATES)
    assert first == second


def test_append_output_and_discarded_never_overwrite(book: OutputWorkbook):
    a, b = tx("Careem", "1", -12.5), tx("Noon", "2", -3.0)
    append_output(book, a, "Taxi", "Travel")
    append_output(book, b, "Lunch", "Team Meals")
    append_discarded(book, a)
    append_discarded(book, b)
    assert book.read_rows(FINALIZED) == [
        ["01/01/2023", "Taxi", "Travel", -12.5],
        ["01/01/2023", "Lunch", "Team Meals", -3.0],
    ]
    assert conforming(book, DISCARDED) == [a, b]


def test_restore_candidates_order_reverses_and_pads(book: OutputWorkbook):
    originals = [tx(f"Name {i}", str(i)) for i in range(5)]
    persist_queue(book, originals)
    remaining = originals[1:]
    restore_candidates_order(book, remaining, original_length=5)
    rows = book.read_rows(CANDIDATES)
    assert conforming(book) == list(reversed(remaining))
    assert rows[4] == []


def test_restore_candidates_order_truncates_to_original_length(book: OutputWorkbook):
    queue = [tx("A", "1"), tx("B", "2"), tx("C", "3")]
    restore_candidates_order(book, queue, original_length=2)
    assert [t.id for t in conforming(book)] == ["3", "2"]


def test_parse_sheet_date_ignores_marker():
    assert parse_sheet_date("05/01/2023") == parse_sheet_date(f"{SORTED_DATE_MARKER}05/01/2023")
    assert parse_sheet_date("05/01/2023").month == 1
    assert parse_sheet_date("2023-01-05") is None


def test_sort_finalized_sheet_descending_with_marker(book: OutputWorkbook):
    append_output(book, tx("Zoom", "1", date="01/01/2023"), "Zoom", "Software")
    append_output(book, tx("Etisalat", "2", date="05/01/2023"), "Phone", "Telephones")
    sort_finalized_sheet(book)
    rows = book.read_rows(FINALIZED)
    assert [r[0] for r in rows] == ["x05/01/2023", "x01/01/2023"]
    assert [r[1] for r in rows] == ["Phone", "Zoom"]


def test_sort_finalized_sheet_is_stable_when_rerun(book: OutputWorkbook):
    append_output(book, tx("Zoom", "1", date="01/01/2023"), "Zoom", "Software")
    append_output(book, tx("Etisalat", "2", date="05/01/2023"), "Phone", "Telephones")
    sort_finalized_sheet(book)
    sort_finalized_sheet(book)
    assert [r[0] for r in book.read_rows(FINALIZED)] == ["x05/01/2023", "x01/01/2023"]


def test_sort_finalized_sheet_drops_non_conforming_rows(book: OutputWorkbook):
    append_output(book, tx("Zoom", "1", date="01/01/2023"), "Zoom", "Software")
    book.append_rows(FINALIZED, [["02/01/2023", "stray", "row"]])
    append_output(book, tx("Etisalat", "2", date="05/01/2023"), "Phone", "Telephones")
    records = sort_finalized_sheet(book)
    assert [r.title for r in records] == ["Phone", "Zoom"]
    rows = book.read_rows(FINALIZED)
    assert [len(r) for r in rows] == [4, 4, 0]


def test_finalize_on_exit_restores_and_sorts(tmp_path: Path, book: OutputWorkbook):
    queue = load_candidates(book, SCENARIO_ROWS)
    append_output(book, queue[0], "Coffee", "Team Meals")
    finalize_on_exit(book, queue[1:], original_length=len(queue))
    reopened = OutputWorkbook.open(tmp_path / "out.xlsx")
    assert [t.id for t in conforming(reopened)] == ["123"]
    assert reopened.read_rows(FINALIZED)[0][0] == "x02/01/2023"
