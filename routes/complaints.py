"""Citizen case intake and public tracking blueprint."""
import os

from flask import Blueprint, current_app, jsonify, request
from flask_wtf.file import FileAllowed, FileField
from wtforms import DateField, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

from routes.forms import ApiForm, form_error_response
from utils.case_store import (
    COMPLAINT,
    MAX_REPORTED_AGE,
    MISSING_PERSON,
    create_complaint,
    create_missing_person_case,
    list_cases,
)
from utils.case_tracking import track_by_case_id, track_by_contact
from utils.errors import CaseConflictError, CaseError, CaseNotFoundError, CaseStoreError, CaseValidationError
from utils.media import ALLOWED_MEDIA_EXTENSIONS, DEFAULT_MAX_MEDIA_BYTES, has_upload, persist_media

complaints_bp = Blueprint("complaints", __name__)

DEFAULT_CATEGORY = "Parks & Trees"


class ComplaintSubmissionForm(ApiForm):
    subject = StringField("Subject", validators=[DataRequired(), Length(max=255)])
    description = TextAreaField("Description", validators=[DataRequired(), Length(max=5000)])
    category = StringField("Category", validators=[DataRequired(), Length(max=120)])
    location = StringField("Location", validators=[DataRequired(), Length(max=500)])
    mobile = StringField("Mobile Number", validators=[DataRequired(), Length(max=20)])
    # Collected by the intake page; the code is not checked on submission.
    otp = StringField("OTP", validators=[Optional()])
    media = FileField("Photo or video", validators=[FileAllowed(sorted(ALLOWED_MEDIA_EXTENSIONS), "Unsupported media type")])


class MissingPersonForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)])
    age = IntegerField("Age", validators=[InputRequired(), NumberRange(min=0, max=MAX_REPORTED_AGE)])
    gender = StringField("Gender", validators=[DataRequired(), Length(max=20)])
    lastSeen = DateField("Last Seen Date", format="%Y-%m-%d", validators=[InputRequired()])
    location = StringField("Last Seen Location", validators=[DataRequired(), Length(max=500)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=5000)])
    reporter_mobile = StringField("Reporter Mobile", validators=[DataRequired(), Length(max=20)])
    media = FileField("Photo or video", validators=[FileAllowed(sorted(ALLOWED_MEDIA_EXTENSIONS), "Unsupported media type")])


class TrackStatusForm(ApiForm):
    caseId = StringField("Case ID")


class ContactLookupForm(ApiForm):
    mobile = StringField("Mobile Number")


def _store_media(file) -> dict | None:
    if not has_upload(file):
        return None
    upload_dir = current_app.config.get("MEDIA_UPLOAD_FOLDER")
    max_bytes = int(current_app.config.get("MAX_MEDIA_UPLOAD_BYTES", DEFAULT_MAX_MEDIA_BYTES))
    stored = persist_media(file, upload_dir, max_bytes=max_bytes)
    current_app.logger.info("case_media_stored", extra={"file_name": stored["file_name"], "size": stored["size"]})
    return stored


def _discard_media(stored: dict | None) -> None:
    """Remove an upload whose case record was never written."""
    if stored and os.path.exists(stored["path"]):
        os.remove(stored["path"])
        current_app.logger.info("case_media_discarded", extra={"file_name": stored["file_name"]})


def _case_error_response(exc: CaseError, store_message: str):
    if isinstance(exc, CaseValidationError):
        return jsonify({"success": False, "message": exc.message, "fields": exc.fields}), 400
    if isinstance(exc, CaseConflictError):
        return jsonify({"success": False, "message": exc.message}), 409
    return jsonify({"success": False, "message": store_message}), 500


@complaints_bp.route("/submitComplaint", methods=["POST"])
def submit_complaint():
    form = ComplaintSubmissionForm()
    if not form.validate_on_submit():
        return form_error_response(form, "Missing required fields.")

    try:
        stored = _store_media(form.media.data)
    except ValueError as exc:
        current_app.logger.warning("complaint_media_rejected", extra={"error": str(exc)})
        return jsonify({"success": False, "message": str(exc)}), 400

    try:
        case_id = create_complaint(
            {
                "subject": form.subject.data,
                "description": form.description.data,
                "category": form.category.data,
                "location": form.location.data,
                "contact": form.mobile.data,
                "media_path": stored["public_path"] if stored else None,
            }
        )
    except CaseError as exc:
        _discard_media(stored)
        return _case_error_response(exc, "Error submitting complaint to the database.")

    return jsonify(
        {
            "success": True,
            "caseId": case_id,
            "subject": form.subject.data.strip(),
            "category": form.category.data.strip(),
            "location": form.location.data.strip(),
        }
    )


@complaints_bp.route("/complaint-submitted", methods=["GET"])
def complaint_submitted():
    args = request.args
    return jsonify(
        {
            "caseId": args.get("caseId") or "N/A",
            "subject": args.get("subject") or "N/A",
            "location": args.get("location") or "N/A",
            "status": args.get("status") or "Submitted",
            "category": args.get("category") or "N/A",
        }
    )


@complaints_bp.route("/complainform", methods=["GET"])
def complaint_form_context():
    return jsonify({"category": request.args.get("category") or DEFAULT_CATEGORY})


@complaints_bp.route("/submit-missing-person", methods=["POST"])
def submit_missing_person():
    form = MissingPersonForm()
    if not form.validate_on_submit():
        return form_error_response(form, "Missing required fields.")

    try:
        stored = _store_media(form.media.data)
    except ValueError as exc:
        current_app.logger.warning("missing_person_media_rejected", extra={"error": str(exc)})
        return jsonify({"success": False, "message": str(exc)}), 400

    try:
        case_id = create_missing_person_case(
            {
                "name": form.name.data,
                "age": form.age.data,
                "gender": form.gender.data,
                "last_seen_date": form.lastSeen.data,
                "location": form.location.data,
                "description": form.description.data,
                "reporter_contact": form.reporter_mobile.data,
                "media_path": stored["public_path"] if stored else None,
            }
        )
    except CaseError as exc:
        _discard_media(stored)
        return _case_error_response(exc, "Error submitting report to the database.")

    return jsonify(
        {
            "success": True,
            "caseId": case_id,
            "message": "Missing person report submitted successfully.",
        }
    )


@complaints_bp.route("/missing-persons", methods=["GET"])
def missing_persons():
    try:
        reports = list_cases(MISSING_PERSON)
    except CaseStoreError:
        return jsonify({"success": False, "message": "Error fetching missing person reports."}), 500
    return jsonify({"missing_persons": [r.to_dict() for r in reports]})


@complaints_bp.route("/trackStatus", methods=["POST"])
def track_status():
    form = TrackStatusForm()
    try:
        complaint = track_by_case_id(form.caseId.data or "")
    except CaseValidationError:
        return jsonify({"complaint": None, "message": "Please enter a Case ID"}), 400
    except CaseNotFoundError:
        return jsonify({"complaint": None, "message": "Case ID not found"}), 404
    except CaseStoreError:
        return jsonify({"complaint": None, "message": "Server error"}), 500

    return jsonify({"complaint": complaint.to_dict(), "message": None})


@complaints_bp.route("/my-complaints", methods=["POST"])
def my_complaints():
    form = ContactLookupForm()
    mobile = (form.mobile.data or "").strip()
    try:
        complaints = track_by_contact(mobile)
    except CaseValidationError:
        return jsonify({"complaints": [], "mobile": None, "message": "Please enter a mobile number."}), 400
    except CaseStoreError:
        return jsonify({"complaints": [], "mobile": mobile, "message": "Error fetching complaints."}), 500
    return jsonify({"complaints": [c.to_dict() for c in complaints], "mobile": mobile})


@complaints_bp.route("/map-view", methods=["GET"])
def map_view():
    try:
        complaints = list_cases(COMPLAINT)
    except CaseStoreError:
        return jsonify({"success": False, "message": "Error loading map data"}), 500
    markers = [
        {"case_id": c.case_id, "subject": c.subject, "location": c.location, "status": c.status}
        for c in complaints
        if c.location
    ]
    return jsonify({"complaints": markers})
