"""Read-only case queries for the public tracking pages and the home page."""
from typing import Dict, List

from models import ComplaintStatus
from utils.case_store import COMPLAINT, count_by_status, find_by_case_id, find_by_contact


def track_by_case_id(case_id: str, kind: str = COMPLAINT):
    return find_by_case_id(kind, case_id)


def track_by_contact(contact: str, kind: str = COMPLAINT) -> List:
    return find_by_contact(kind, contact)


def aggregate_counts() -> Dict[str, int]:
    counts = count_by_status(COMPLAINT)
    total = sum(counts.values())
    resolved = counts.get(ComplaintStatus.RESOLVED.value, 0)
    # Derived on every call so it always agrees with the two source counts.
    return {"total": total, "resolved": resolved, "pending": total - resolved}
