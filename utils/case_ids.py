"""Case identifier minting with a bounded regenerate-and-retry on collision."""
import secrets
from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from utils.errors import CaseConflictError, CaseStoreError

CASE_ID_PREFIX = "CASE-"
CASE_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CASE_ID_SUFFIX_LENGTH = 6
DEFAULT_MAX_ATTEMPTS = 3

T = TypeVar("T")


def generate_case_id() -> str:
    suffix = "".join(secrets.choice(CASE_ID_ALPHABET) for _ in range(CASE_ID_SUFFIX_LENGTH))
    return f"{CASE_ID_PREFIX}{suffix}"


def create_with_unique_case_id(
    model,
    build: Callable[[str], T],
    max_attempts: int | None = None,
    generator: Callable[[], str] | None = None,
) -> T:
    """Insert the record produced by ``build(case_id)``, regenerating the id on collision.

    The unique constraint on ``model.case_id`` is the integrity backstop; a
    collision is detected by the failed insert, after which a fresh id is drawn
    up to ``max_attempts`` times. Integrity errors unrelated to the identifier
    are reported as conflicts straight away.
    """
    if max_attempts is None:
        max_attempts = int(current_app.config.get("CASE_ID_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS))
    max_attempts = max(1, max_attempts)
    generator = generator or generate_case_id

    for attempt in range(1, max_attempts + 1):
        case_id = generator()
        record = build(case_id)
        db.session.add(record)
        try:
            db.session.commit()
            return record
        except IntegrityError as exc:
            db.session.rollback()
            if not _case_id_taken(model, case_id):
                current_app.logger.warning(
                    "case_insert_constraint_violation",
                    extra={"table": model.__tablename__, "error": str(exc.orig)},
                )
                raise CaseConflictError("Record violates a storage constraint.") from exc
            current_app.logger.warning(
                "case_id_collision",
                extra={"table": model.__tablename__, "case_id": case_id, "attempt": attempt},
            )
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("case_insert_failed", extra={"table": model.__tablename__})
            raise CaseStoreError() from exc

    raise CaseConflictError()


def _case_id_taken(model, case_id: str) -> bool:
    try:
        return db.session.query(model.id).filter(model.case_id == case_id).first() is not None
    except SQLAlchemyError:
        db.session.rollback()
        return False
