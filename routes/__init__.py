"""Blueprint registration and public portal routes."""
from flask import Blueprint, current_app, jsonify

from utils.case_tracking import aggregate_counts
from utils.errors import CaseStoreError
from utils.registrants import list_registrants
from .admin import admin_bp
from .auth import auth_bp
from .complaints import complaints_bp

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index():
    try:
        stats = aggregate_counts()
    except CaseStoreError:
        current_app.logger.warning("home_stats_unavailable")
        stats = {"total": 0, "resolved": 0, "pending": 0}
    return jsonify({"stats": stats})


@main_bp.route("/api/users", methods=["GET"])
def list_users():
    try:
        registrants = list_registrants()
    except CaseStoreError:
        return jsonify({"success": False, "message": "Server error while fetching users"}), 500
    return jsonify({"success": True, "data": [r.public_payload() for r in registrants]})


__all__ = ["main_bp", "auth_bp", "complaints_bp", "admin_bp"]
