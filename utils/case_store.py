"""Persistence contract for complaints and missing-person reports."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Type

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Complaint, ComplaintStatus, MissingPersonCase, MissingPersonStatus
from utils.case_ids import create_with_unique_case_id
from utils.errors import CaseNotFoundError, CaseStoreError, CaseValidationError

COMPLAINT = "complaint"
MISSING_PERSON = "missing_person"

COMPLAINT_REQUIRED_FIELDS: tuple[str, ...] = ("subject", "description", "category", "location", "contact")
MISSING_PERSON_REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "age",
    "gender",
    "last_seen_date",
    "location",
    "reporter_contact",
)

MAX_REPORTED_AGE = 150


@dataclass(frozen=True)
class CaseKind:
    name: str
    model: Type[db.Model]
    contact_column: str
    statuses: Type[ComplaintStatus] | Type[MissingPersonStatus]


CASE_KINDS: Dict[str, CaseKind] = {
    COMPLAINT: CaseKind(COMPLAINT, Complaint, "contact", ComplaintStatus),
    MISSING_PERSON: CaseKind(MISSING_PERSON, MissingPersonCase, "reporter_contact", MissingPersonStatus),
}


def case_kind(kind: str) -> CaseKind:
    try:
        return CASE_KINDS[kind]
    except KeyError:
        raise CaseValidationError(f"Unknown case type: {kind}", fields=["kind"]) from None


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def _require(fields: Mapping[str, Any], required: tuple[str, ...]) -> Dict[str, Any]:
    cleaned = {key: _clean(value) for key, value in fields.items()}
    missing = [name for name in required if cleaned.get(name) in (None, "")]
    if missing:
        raise CaseValidationError("Missing required fields.", fields=missing)
    return cleaned


def normalize_contact(value: Any) -> str:
    return "".join(str(value or "").split())


def _parse_age(value: Any) -> int:
    try:
        age = int(value)
    except (TypeError, ValueError):
        raise CaseValidationError("Age must be a whole number.", fields=["age"]) from None
    if age < 0 or age > MAX_REPORTED_AGE:
        raise CaseValidationError("Age is out of range.", fields=["age"])
    return age


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError:
        raise CaseValidationError("Last seen date must use YYYY-MM-DD.", fields=["last_seen_date"]) from None


def create_complaint(fields: Mapping[str, Any]) -> str:
    data = _require(fields, COMPLAINT_REQUIRED_FIELDS)

    def build(case_id: str) -> Complaint:
        return Complaint(
            case_id=case_id,
            subject=data["subject"],
            description=data["description"],
            category=data["category"],
            location=data["location"],
            contact=normalize_contact(data["contact"]),
            media_path=data.get("media_path") or None,
            status=ComplaintStatus.SUBMITTED.value,
        )

    complaint = create_with_unique_case_id(Complaint, build)
    current_app.logger.info(
        "complaint_created",
        extra={"case_id": complaint.case_id, "category": complaint.category},
    )
    return complaint.case_id


def create_missing_person_case(fields: Mapping[str, Any]) -> str:
    data = _require(fields, MISSING_PERSON_REQUIRED_FIELDS)
    age = _parse_age(data["age"])
    last_seen = _parse_date(data["last_seen_date"])

    def build(case_id: str) -> MissingPersonCase:
        return MissingPersonCase(
            case_id=case_id,
            name=data["name"],
            age=age,
            gender=data["gender"],
            last_seen_date=last_seen,
            last_seen_location=data["location"],
            description=data.get("description") or None,
            media_path=data.get("media_path") or None,
            reporter_contact=normalize_contact(data["reporter_contact"]),
            status=MissingPersonStatus.ACTIVE.value,
        )

    report = create_with_unique_case_id(MissingPersonCase, build)
    current_app.logger.info("missing_person_case_created", extra={"case_id": report.case_id})
    return report.case_id


def find_by_case_id(kind: str, case_id: str):
    entry = case_kind(kind)
    token = (case_id or "").strip()
    if not token:
        raise CaseValidationError("Please enter a Case ID", fields=["caseId"])
    try:
        record = entry.model.query.filter(func.upper(entry.model.case_id) == token.upper()).first()
    except SQLAlchemyError as exc:
        current_app.logger.exception("case_lookup_failed", extra={"kind": kind})
        raise CaseStoreError() from exc
    if record is None:
        raise CaseNotFoundError()
    return record


def find_by_contact(kind: str, contact: Any) -> List:
    entry = case_kind(kind)
    value = normalize_contact(contact)
    if not value:
        raise CaseValidationError("Please enter a mobile number.", fields=["mobile"])
    column = getattr(entry.model, entry.contact_column)
    try:
        return (
            entry.model.query.filter(column == value)
            .order_by(entry.model.created_at.desc(), entry.model.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        current_app.logger.exception("case_contact_lookup_failed", extra={"kind": kind})
        raise CaseStoreError() from exc


def list_cases(kind: str) -> List:
    entry = case_kind(kind)
    try:
        return entry.model.query.order_by(entry.model.created_at.desc(), entry.model.id.desc()).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("case_listing_failed", extra={"kind": kind})
        raise CaseStoreError() from exc


def set_status(kind: str, row_id: Any, new_status) -> None:
    """Write ``new_status`` onto one row in a single UPDATE statement."""
    entry = case_kind(kind)
    try:
        status = entry.statuses(new_status)
    except ValueError:
        raise CaseValidationError(f"Invalid status: {new_status}", fields=["status"]) from None
    try:
        pk = int(row_id)
    except (TypeError, ValueError):
        raise CaseNotFoundError() from None

    try:
        updated = (
            entry.model.query.filter(entry.model.id == pk)
            .update({entry.model.status: status.value}, synchronize_session=False)
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("case_status_update_failed", extra={"kind": kind, "row_id": pk})
        raise CaseStoreError() from exc

    if not updated:
        raise CaseNotFoundError()
    current_app.logger.info("case_status_updated", extra={"kind": kind, "row_id": pk, "status": status.value})


def count_by_status(kind: str) -> Dict[str, int]:
    entry = case_kind(kind)
    try:
        rows = (
            db.session.query(entry.model.status, func.count(entry.model.id))
            .group_by(entry.model.status)
            .all()
        )
    except SQLAlchemyError as exc:
        current_app.logger.exception("case_count_failed", extra={"kind": kind})
        raise CaseStoreError() from exc
    counts = {status.value: 0 for status in entry.statuses}
    for status, count in rows:
        counts[status] = int(count or 0)
    return counts
