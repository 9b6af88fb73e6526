"""Citizen profile records, looked up by name to avoid duplicates."""
from __future__ import annotations

from typing import Any, List, Mapping, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Registrant
from utils.errors import CaseStoreError, CaseValidationError

REGISTRANT_FIELDS: tuple[str, ...] = ("first_name", "last_name", "gender", "age", "email", "address")
MIN_AGE = 5
MAX_AGE = 120


def register_or_get(fields: Mapping[str, Any]) -> Tuple[Registrant, bool]:
    """Return the registrant matching (first name, last name), creating it if absent."""
    data = {key: (str(fields.get(key)).strip() if fields.get(key) is not None else "") for key in REGISTRANT_FIELDS}
    missing = [key for key in REGISTRANT_FIELDS if not data[key]]
    if missing:
        raise CaseValidationError("All fields are required", fields=missing)
    try:
        age = int(data["age"])
    except ValueError:
        raise CaseValidationError("Age must be a whole number.", fields=["age"]) from None
    if age < MIN_AGE or age > MAX_AGE:
        raise CaseValidationError(f"Age must be between {MIN_AGE} and {MAX_AGE}.", fields=["age"])

    try:
        existing = Registrant.query.filter_by(first_name=data["first_name"], last_name=data["last_name"]).first()
        if existing:
            return existing, False

        registrant = Registrant(
            first_name=data["first_name"],
            last_name=data["last_name"],
            gender=data["gender"],
            age=age,
            email=data["email"].lower(),
            address=data["address"],
        )
        db.session.add(registrant)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("registrant_save_failed")
        raise CaseStoreError() from exc

    current_app.logger.info("registrant_created", extra={"registrant_id": registrant.id})
    return registrant, True


def list_registrants() -> List[Registrant]:
    try:
        return Registrant.query.order_by(Registrant.id).all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("registrant_listing_failed")
        raise CaseStoreError() from exc
