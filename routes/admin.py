"""Staff dashboard and case resolution endpoints."""
from flask import Blueprint, current_app, jsonify
from flask_wtf.csrf import generate_csrf
from sqlalchemy.exc import SQLAlchemyError

from models import AdminIdentity
from utils.case_lifecycle import resolve_complaint
from utils.case_store import COMPLAINT, MISSING_PERSON, list_cases
from utils.decorators import admin_required
from utils.errors import CaseNotFoundError, CaseStoreError

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/adminDashboard", methods=["GET"])
@admin_required
def dashboard():
    try:
        complaints = list_cases(COMPLAINT)
        reports = list_cases(MISSING_PERSON)
    except CaseStoreError:
        return jsonify({"success": False, "message": "Database error"}), 500

    payload = {
        "complaints": [c.to_dict() for c in complaints],
        "missing_persons": [r.to_dict() for r in reports],
    }
    if current_app.config.get("WTF_CSRF_ENABLED", True) and current_app.config.get("ADMIN_SESSION_REQUIRED", False):
        payload["csrf_token"] = generate_csrf()
    return jsonify(payload)


@admin_bp.route("/mark-resolved/<string:complaint_id>", methods=["POST"])
@admin_required
def mark_resolved(complaint_id):
    try:
        resolve_complaint(complaint_id)
    except CaseNotFoundError:
        current_app.logger.warning("resolve_unknown_complaint", extra={"row_id": complaint_id})
        return jsonify({"success": False})
    except CaseStoreError:
        return jsonify({"success": False})
    return jsonify({"success": True})


@admin_bp.route("/api/admins", methods=["GET"])
@admin_required
def list_admins():
    try:
        admins = AdminIdentity.query.order_by(AdminIdentity.id).all()
    except SQLAlchemyError:
        current_app.logger.exception("admin_listing_failed")
        return jsonify({"success": False, "message": "Server error while fetching admins"}), 500
    return jsonify({"success": True, "data": [a.public_payload() for a in admins]})
