"""Public interface for the ``reimbursements`` package.

Symbol re-exports only; the interactive flow lives in
``reimbursements.triage`` and the command line in ``reimbursements.cli``.
"""

__version__ = "0.1.0"

from .models import (  # noqa: E402
    CATEGORIES,
    DEFAULT_CATEGORY,
    OutputRecord,
    SheetSchema,
    Transaction,
)
from .similarity import SIMILARITY_THRESHOLD, compare_two_strings, find_similar  # noqa: E402
from .triage import TriageSession, TriageSummary, run_triage, start_session  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "Transaction",
    "OutputRecord",
    "SheetSchema",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    # Matching
    "SIMILARITY_THRESHOLD",
    "compare_two_strings",
    "find_similar",
    # Triage
    "TriageSession",
    "TriageSummary",
    "start_session",
    "run_triage",
]
