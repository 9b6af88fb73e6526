"""Persistent records for cases, admin OTP challenges and citizen registrants."""
import enum
from datetime import datetime

from flask_login import UserMixin

from extensions import db


MEDIA_PLACEHOLDER_URL = "https://via.placeholder.com/320x200?text=No+Image"


class ComplaintStatus(str, enum.Enum):
	SUBMITTED = "Submitted"
	IN_REVIEW = "In Review"
	RESOLVED = "Resolved"
	CLOSED = "Closed"


class MissingPersonStatus(str, enum.Enum):
	ACTIVE = "Active"
	FOUND = "Found"
	CLOSED = "Closed"


COMPLAINT_STATUSES: tuple[str, ...] = tuple(s.value for s in ComplaintStatus)

MISSING_PERSON_STATUSES: tuple[str, ...] = tuple(s.value for s in MissingPersonStatus)

COMPLAINT_STATUS_COLORS: dict[str, str] = {
	ComplaintStatus.SUBMITTED.value: "#ff9800",
	ComplaintStatus.IN_REVIEW.value: "#2196f3",
	ComplaintStatus.RESOLVED.value: "#4caf50",
	ComplaintStatus.CLOSED.value: "#9e9e9e",
}


def _status_check(column: str, values: tuple[str, ...], name: str):
	quoted = ",".join(f"'{v}'" for v in values)
	return db.CheckConstraint(f"{column} IN ({quoted})", name=name)


def status_color(status: str | None) -> str:
	return COMPLAINT_STATUS_COLORS.get(status or "", "#000")


def media_url(path: str | None) -> str:
	if path and path.startswith("/uploads/"):
		return path
	return MEDIA_PLACEHOLDER_URL


class Complaint(db.Model):
	__tablename__ = "complaints"

	id = db.Column(db.Integer, primary_key=True)
	case_id = db.Column(db.String(16), unique=True, nullable=False, index=True)
	subject = db.Column(db.String(255), nullable=False)
	description = db.Column(db.Text, nullable=False)
	category = db.Column(db.String(120), nullable=False, index=True)
	media_path = db.Column(db.String(500), nullable=True)
	contact = db.Column(db.String(20), nullable=False, index=True)
	location = db.Column(db.String(500), nullable=True)
	status = db.Column(db.String(20), nullable=False, default=ComplaintStatus.SUBMITTED.value, index=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

	__table_args__ = (
		_status_check("status", COMPLAINT_STATUSES, "ck_complaint_status_valid"),
	)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"case_id": self.case_id,
			"subject": self.subject,
			"description": self.description,
			"category": self.category,
			"media_path": self.media_path,
			"media_url": media_url(self.media_path),
			"contact": self.contact,
			"location": self.location,
			"status": self.status,
			"status_color": status_color(self.status),
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}


class MissingPersonCase(db.Model):
	__tablename__ = "missing_persons"

	id = db.Column(db.Integer, primary_key=True)
	case_id = db.Column(db.String(16), unique=True, nullable=False, index=True)
	name = db.Column(db.String(255), nullable=False)
	age = db.Column(db.Integer, nullable=False)
	gender = db.Column(db.String(20), nullable=False)
	last_seen_date = db.Column(db.Date, nullable=False)
	last_seen_location = db.Column(db.String(500), nullable=False)
	description = db.Column(db.Text, nullable=True)
	media_path = db.Column(db.String(500), nullable=True)
	reporter_contact = db.Column(db.String(20), nullable=False, index=True)
	status = db.Column(db.String(20), nullable=False, default=MissingPersonStatus.ACTIVE.value, index=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

	__table_args__ = (
		_status_check("status", MISSING_PERSON_STATUSES, "ck_missing_person_status_valid"),
	)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"case_id": self.case_id,
			"name": self.name,
			"age": self.age,
			"gender": self.gender,
			"last_seen_date": self.last_seen_date.isoformat() if self.last_seen_date else None,
			"last_seen_location": self.last_seen_location,
			"description": self.description,
			"media_path": self.media_path,
			"media_url": media_url(self.media_path),
			"reporter_contact": self.reporter_contact,
			"status": self.status,
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}


class AdminIdentity(UserMixin, db.Model):
	__tablename__ = "admins"

	id = db.Column(db.Integer, primary_key=True)
	name = db.Column(db.String(150), nullable=False)
	department_name = db.Column(db.String(255), nullable=False)
	department_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
	mobile = db.Column(db.String(20), nullable=False)
	otp_hash = db.Column(db.String(255), nullable=True)
	otp_expires_at = db.Column(db.DateTime, nullable=True)
	otp_issued_at = db.Column(db.DateTime, nullable=True, index=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	def public_payload(self) -> dict:
		return {
			"id": self.id,
			"name": self.name,
			"department_name": self.department_name,
			"department_id": self.department_id,
			"mobile_no": self.mobile,
		}


class Registrant(db.Model):
	__tablename__ = "registrants"

	id = db.Column(db.Integer, primary_key=True)
	first_name = db.Column(db.String(100), nullable=False)
	last_name = db.Column(db.String(100), nullable=False)
	gender = db.Column(db.String(20), nullable=False)
	age = db.Column(db.Integer, nullable=False)
	email = db.Column(db.String(100), nullable=False)
	address = db.Column(db.String(250), nullable=False)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	__table_args__ = (
		db.CheckConstraint("age >= 5 AND age <= 120", name="ck_registrant_age_range"),
		db.Index("ix_registrant_name", "first_name", "last_name"),
	)

	def public_payload(self) -> dict:
		return {
			"id": self.id,
			"first_name": self.first_name,
			"last_name": self.last_name,
			"gender": self.gender,
			"age": self.age,
			"address": self.address,
			"email_id": self.email,
		}
