"""Admin OTP sign-in, citizen registration and contact verification codes."""
from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for
from flask_login import login_user, logout_user
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Email, InputRequired, Length, NumberRange

from routes.forms import ApiForm, form_error_response
from utils.errors import CaseStoreError, CaseValidationError
from utils.otp_service import issue_admin_otp, issue_contact_otp, verify_admin_otp
from utils.registrants import MAX_AGE, MIN_AGE, register_or_get
from utils.security import is_safe_redirect_url

auth_bp = Blueprint("auth", __name__)


class AdminLoginForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=150)])
    department_name = StringField("Department Name", validators=[DataRequired(), Length(max=255)])
    department_id = StringField("Department ID", validators=[DataRequired(), Length(max=64)])
    mobile_no = StringField("Mobile Number", validators=[DataRequired(), Length(max=20)])


class AdminOtpForm(ApiForm):
    otpInput = StringField("OTP")


class RegistrantForm(ApiForm):
    first_name = StringField("First Name", validators=[DataRequired(), Length(max=100)])
    last_name = StringField("Last Name", validators=[DataRequired(), Length(max=100)])
    gender = StringField("Gender", validators=[DataRequired(), Length(max=20)])
    age = IntegerField(
        "Age",
        validators=[
            InputRequired(),
            NumberRange(min=MIN_AGE, max=MAX_AGE, message=f"Age must be between {MIN_AGE} and {MAX_AGE}."),
        ],
    )
    email_id = StringField("Email", validators=[DataRequired(), Email(), Length(max=100)])
    address = StringField("Address", validators=[DataRequired(), Length(max=250)])


class ContactOtpForm(ApiForm):
    mobile = StringField("Mobile Number")


@auth_bp.route("/adminLogin", methods=["POST"])
def admin_login():
    form = AdminLoginForm()
    if not form.validate_on_submit():
        return jsonify({"success": False, "message": "All fields are required"}), 400

    try:
        code = issue_admin_otp(
            form.name.data,
            form.department_name.data,
            form.department_id.data,
            form.mobile_no.data,
        )
    except CaseValidationError as exc:
        return jsonify({"success": False, "message": exc.message}), 400
    except CaseStoreError:
        return jsonify({"success": False, "message": "Server error"}), 500

    minutes = int(current_app.config.get("OTP_TTL_SECONDS", 300)) // 60
    payload = {"success": True, "message": f"OTP generated. It is valid for {minutes} minutes."}
    if current_app.config.get("OTP_ECHO_IN_RESPONSE", True):
        payload["otp"] = code
    return jsonify(payload)


@auth_bp.route("/verify-admin-otp", methods=["POST"])
def verify_admin():
    form = AdminOtpForm()
    try:
        admin = verify_admin_otp(form.otpInput.data or "")
    except CaseStoreError:
        return jsonify({"success": False, "message": "Database error"}), 500

    if admin is None:
        return jsonify({"success": False, "message": "Invalid or expired OTP"}), 401

    login_user(admin)
    session.permanent = True
    next_page = request.args.get("next")
    if next_page and is_safe_redirect_url(next_page):
        return redirect(next_page)
    return redirect(url_for("admin.dashboard"))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    session.clear()
    return jsonify({"success": True})


@auth_bp.route("/userLogin", methods=["POST"])
def user_login():
    form = RegistrantForm()
    if not form.validate_on_submit():
        return form_error_response(form, "All fields are required")

    try:
        registrant, created = register_or_get(
            {
                "first_name": form.first_name.data,
                "last_name": form.last_name.data,
                "gender": form.gender.data,
                "age": form.age.data,
                "email": form.email_id.data,
                "address": form.address.data,
            }
        )
    except CaseValidationError as exc:
        return jsonify({"success": False, "message": exc.message}), 400
    except CaseStoreError:
        return jsonify({"success": False, "message": "Database error"}), 500

    current_app.logger.info("registrant_signed_in", extra={"registrant_id": registrant.id, "new_registrant": created})
    return redirect(url_for("main.index", login="success"))


@auth_bp.route("/send-otp", methods=["POST"])
def send_contact_otp():
    form = ContactOtpForm()
    try:
        code = issue_contact_otp(form.mobile.data or "")
    except CaseValidationError as exc:
        return jsonify({"success": False, "message": exc.message}), 400

    payload = {"success": True, "message": "OTP sent successfully."}
    if current_app.config.get("OTP_ECHO_IN_RESPONSE", True):
        payload["otp"] = code
    return jsonify(payload)
