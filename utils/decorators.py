"""Access decorators for staff-only endpoints."""
from functools import wraps

from flask import current_app, jsonify, request
from flask_login import current_user

from models import AdminIdentity


def admin_required(view_func):
    """Require an OTP-verified admin session when ADMIN_SESSION_REQUIRED is on.

    With the flag off the endpoint stays reachable without a session, which
    matches the redirect-only sign-in the portal has always had.
    """

    @wraps(view_func)
    def wrapped(*args, **kwargs):
        if not current_app.config.get("ADMIN_SESSION_REQUIRED", False):
            return view_func(*args, **kwargs)
        if current_user.is_authenticated and isinstance(current_user._get_current_object(), AdminIdentity):
            return view_func(*args, **kwargs)

        current_app.logger.warning(
            "admin_session_missing",
            extra={"path": request.path, "method": request.method},
        )
        return jsonify({"success": False, "message": "Admin sign-in required"}), 401

    return wrapped
