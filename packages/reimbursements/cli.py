"""CLI for the ``reimbursements`` package.

``reimbursements INPUT OUTPUT`` reads a bank export, creates OUTPUT and runs
the interactive triage loop against it. Environment variables are loaded from
a local ``.env`` (``python-dotenv``, never overriding the real environment)
before logging is configured. Business logic lives in
``reimbursements.triage`` and related modules.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from . import __version__
from .logging_setup import configure_logging
from .term_ui import Prompter, PromptToolkitPrompter
from .workbook import SUPPORTED_INPUT_SUFFIXES


def cmd_reimburse(
    input_path: str,
    output_path: str,
    *,
    prompter: Prompter | None = None,
    console: Console | None = None,
) -> int:
    """Validate paths, then run the triage loop end to end.

    Usage errors (missing input, unsupported input type, existing output) are
    written to stderr and return ``1`` before any output file is created.
    Failures after that point (I/O, interrupted prompts) propagate.
    """

    from .triage import run_triage, start_session

    inp = Path(input_path).resolve()
    if not inp.exists():
        print(f"Error: Input file '{inp}' not found", file=sys.stderr)
        return 1
    if inp.suffix.lower() not in SUPPORTED_INPUT_SUFFIXES:
        print(
            f"Error: Input file '{inp}' is not a supported type "
            f"({', '.join(sorted(SUPPORTED_INPUT_SUFFIXES))})",
            file=sys.stderr,
        )
        return 1

    out = Path(output_path).resolve()
    if out.exists():
        print(f"Error: Output file '{out}' already exists", file=sys.stderr)
        return 1

    console = console or Console()
    console.print(f"Reading input file '{inp}'", markup=False)
    console.print(f"Creating output file '{out}'", markup=False)
    session = start_session(inp, out)

    summary = run_triage(session, prompter or PromptToolkitPrompter(), console)
    console.print(
        f"{summary.finalized} finalized, {summary.discarded} discarded, "
        f"{summary.remaining} left for a later run."
    )
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help=(
        "Turn a bank-exported transaction sheet into a categorized reimbursement "
        "workbook through an interactive review. Loads settings from a local .env."
    ),
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reimbursements {__version__}")
        raise typer.Exit()


@app.command()
def main(
    input_path: Annotated[
        Path,
        typer.Argument(metavar="INPUT", help="The bank export to read (.xlsx, .xlsm or .csv)."),
    ],
    output_path: Annotated[
        Path,
        typer.Argument(
            metavar="OUTPUT", help="The reimbursements workbook to create (must not exist)."
        ),
    ],
    *,
    log_level: Annotated[
        str | None,
        typer.Option(help="Log level (falls back to REIMBURSEMENTS_LOG_LEVEL, then INFO)."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Review INPUT transaction by transaction and write OUTPUT."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)

    code = cmd_reimburse(str(input_path), str(output_path))
    if code:
        raise typer.Exit(code)


if __name__ == "__main__":  # pragma: no cover
    app()
