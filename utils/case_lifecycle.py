"""Status transitions exposed to authenticated staff."""
from typing import Any

from models import ComplaintStatus
from utils.case_store import COMPLAINT, set_status


def resolve_complaint(row_id: Any) -> None:
    """Mark a complaint resolved whatever its current state.

    Resolving an already resolved or closed complaint succeeds and leaves it
    ``Resolved``. Unknown ids raise ``CaseNotFoundError`` without touching
    any row.
    """
    set_status(COMPLAINT, row_id, ComplaintStatus.RESOLVED)
