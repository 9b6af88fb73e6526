"""One-time code challenges for admin sign-in and citizen contact checks.

Admin codes live on the ``admins`` row keyed by department id: issuing a new
code overwrites the previous one, so at most one code is outstanding per
department. Verification takes only the code. It matches the most recently
issued unexpired code across every admin; the code is the sole factor.

Codes are stored as salted PBKDF2 hashes. A six digit code has only a million
values, so the hash slows offline guessing but does not prevent it; the short
expiry and single use are what bound the exposure.
"""
import re
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from models import AdminIdentity
from utils.errors import CaseStoreError, CaseValidationError
from utils.security import generate_otp

OTP_LENGTH = 6
DEFAULT_OTP_TTL_SECONDS = 300
ADMIN_REQUIRED_FIELDS: tuple[str, ...] = ("name", "department_name", "department_id", "mobile")

_MOBILE_PATTERN = re.compile(r"^\d{10}$")


def _text(value) -> str:
    return "" if value is None else str(value).strip()


def _ttl() -> timedelta:
    return timedelta(seconds=int(current_app.config.get("OTP_TTL_SECONDS", DEFAULT_OTP_TTL_SECONDS)))


def _hash_code(code: str) -> str:
    return generate_password_hash(code, method="pbkdf2:sha256", salt_length=12)


def _admin_for_department(department_id: str) -> AdminIdentity | None:
    return AdminIdentity.query.filter_by(department_id=department_id).first()


def _write_challenge(values: dict, digest: str, issued_at: datetime) -> AdminIdentity:
    admin = _admin_for_department(values["department_id"])
    if admin is None:
        admin = AdminIdentity(
            name=values["name"],
            department_name=values["department_name"],
            department_id=values["department_id"],
            mobile=values["mobile"],
        )
        db.session.add(admin)
    admin.otp_hash = digest
    admin.otp_issued_at = issued_at
    admin.otp_expires_at = issued_at + _ttl()
    db.session.commit()
    return admin


def issue_admin_otp(
    name: str,
    department_name: str,
    department_id: str,
    mobile: str,
    now: datetime | None = None,
) -> str:
    values = {
        "name": _text(name),
        "department_name": _text(department_name),
        "department_id": _text(department_id),
        "mobile": _text(mobile),
    }
    missing = [key for key in ADMIN_REQUIRED_FIELDS if not values[key]]
    if missing:
        raise CaseValidationError("All fields are required", fields=missing)

    issued_at = now or datetime.utcnow()
    code = generate_otp(OTP_LENGTH)
    digest = _hash_code(code)
    department_key = values["department_id"]

    try:
        try:
            admin = _write_challenge(values, digest, issued_at)
        except IntegrityError:
            # A concurrent first sign-in created the row; overwrite its challenge.
            db.session.rollback()
            current_app.logger.info("admin_otp_upsert_retry", extra={"department_id": department_key})
            admin = _write_challenge(values, digest, issued_at)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("admin_otp_issue_failed", extra={"department_id": department_key})
        raise CaseStoreError() from exc

    current_app.logger.info(
        "admin_otp_issued",
        extra={"department_id": department_key, "expires_at": admin.otp_expires_at.isoformat()},
    )
    return code


def _find_challenge(candidate: str, checked_at: datetime) -> tuple[AdminIdentity | None, str | None]:
    """Return the newest live challenge matching ``candidate`` with the digest it was matched on."""
    live = (
        AdminIdentity.query.filter(
            AdminIdentity.otp_hash.isnot(None),
            AdminIdentity.otp_expires_at > checked_at,
        )
        .order_by(AdminIdentity.otp_issued_at.desc())
        .all()
    )
    for admin in live:
        if check_password_hash(admin.otp_hash, candidate):
            return admin, admin.otp_hash
    return None, None


def verify_admin_otp(code: str, now: datetime | None = None) -> AdminIdentity | None:
    candidate = _text(code)
    if not candidate:
        return None

    checked_at = now or datetime.utcnow()
    try:
        admin, digest = _find_challenge(candidate, checked_at)
        if admin is None:
            current_app.logger.warning("admin_otp_rejected")
            return None

        # Only the request whose UPDATE still sees the matched digest wins the code.
        consumed = (
            AdminIdentity.query.filter(
                AdminIdentity.id == admin.id,
                AdminIdentity.otp_hash == digest,
                AdminIdentity.otp_expires_at > checked_at,
            )
            .update(
                {AdminIdentity.otp_hash: None, AdminIdentity.otp_expires_at: None},
                synchronize_session=False,
            )
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("admin_otp_verify_failed")
        raise CaseStoreError() from exc

    if not consumed:
        current_app.logger.warning("admin_otp_already_used", extra={"department_id": admin.department_id})
        return None

    current_app.logger.info("admin_otp_verified", extra={"department_id": admin.department_id})
    return admin


def issue_contact_otp(mobile: str) -> str:
    value = _text(mobile)
    if not _MOBILE_PATTERN.match(value):
        raise CaseValidationError("Invalid mobile number.", fields=["mobile"])
    code = generate_otp(OTP_LENGTH)
    current_app.logger.info("contact_otp_issued", extra={"mobile_suffix": value[-4:]})
    return code
