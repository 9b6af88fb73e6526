"""
HTTP tests for the citizen and staff endpoints.
"""

import io
import os

import pytest

from utils.errors import CaseConflictError, CaseStoreError


def _submit(client, form):
    response = client.post("/submitComplaint", json=form)
    assert response.status_code == 200, response.get_json()
    return response.get_json()["caseId"]


class TestComplaintIntake:
    def test_submit_then_track(self, client, sample_complaint_form):
        response = client.post("/submitComplaint", json=sample_complaint_form)
        body = response.get_json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["caseId"].startswith("CASE-")
        assert body["subject"] == "Pothole"

        tracked = client.post("/trackStatus", json={"caseId": body["caseId"].lower()})
        complaint = tracked.get_json()["complaint"]

        assert tracked.status_code == 200
        assert complaint["status"] == "Submitted"
        assert complaint["status_color"] == "#ff9800"
        assert complaint["case_id"] == body["caseId"]

    def test_form_encoded_submission(self, client, sample_complaint_form):
        response = client.post("/submitComplaint", data=sample_complaint_form)
        assert response.get_json()["success"] is True

    def test_missing_category(self, client, sample_complaint_form):
        sample_complaint_form.pop("category")

        response = client.post("/submitComplaint", json=sample_complaint_form)
        body = response.get_json()

        assert response.status_code == 400
        assert body["message"] == "Missing required fields."
        assert body["fields"] == ["category"]
        assert client.get("/").get_json()["stats"]["total"] == 0

    def test_numeric_mobile_in_json(self, client, sample_complaint_form):
        sample_complaint_form["mobile"] = 9876543210
        case_id = _submit(client, sample_complaint_form)

        listed = client.post("/my-complaints", json={"mobile": "9876543210"}).get_json()
        assert [c["case_id"] for c in listed["complaints"]] == [case_id]

    def test_media_upload(self, client, sample_complaint_form, png_bytes):
        data = dict(sample_complaint_form, media=(io.BytesIO(png_bytes), "photo.png"))

        response = client.post("/submitComplaint", data=data, content_type="multipart/form-data")
        case_id = response.get_json()["caseId"]
        complaint = client.post("/trackStatus", json={"caseId": case_id}).get_json()["complaint"]

        assert complaint["media_url"].startswith("/uploads/")

    def test_rejects_corrupt_image(self, client, sample_complaint_form):
        data = dict(sample_complaint_form, media=(io.BytesIO(b"garbage"), "photo.png"))

        response = client.post("/submitComplaint", data=data, content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid image data"

    def test_rejects_disallowed_extension(self, client, sample_complaint_form):
        data = dict(sample_complaint_form, media=(io.BytesIO(b"MZ"), "run.exe"))

        response = client.post("/submitComplaint", data=data, content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json()["message"] == "Unsupported media type"

    def test_confirmation_defaults(self, client):
        body = client.get("/complaint-submitted?caseId=CASE-ABC123").get_json()
        assert body["caseId"] == "CASE-ABC123"
        assert body["subject"] == "N/A"
        assert body["status"] == "Submitted"

    def test_complaint_form_category(self, client):
        assert client.get("/complainform").get_json()["category"] == "Parks & Trees"
        assert client.get("/complainform?category=Roads").get_json()["category"] == "Roads"


class TestTracking:
    def test_blank_case_id(self, client):
        response = client.post("/trackStatus", json={"caseId": "  "})
        assert response.status_code == 400
        assert response.get_json() == {"complaint": None, "message": "Please enter a Case ID"}

    def test_unknown_case_id(self, client):
        response = client.post("/trackStatus", json={"caseId": "CASE-NOPE00"})
        assert response.status_code == 404
        assert response.get_json()["message"] == "Case ID not found"

    def test_my_complaints_requires_mobile(self, client):
        response = client.post("/my-complaints", json={})
        assert response.status_code == 400

    def test_my_complaints_empty(self, client):
        body = client.post("/my-complaints", json={"mobile": "9000000000"}).get_json()
        assert body["complaints"] == []

    def test_map_view(self, client, sample_complaint_form):
        _submit(client, sample_complaint_form)

        markers = client.get("/map-view").get_json()["complaints"]

        assert markers[0]["location"] == "Main St"


class TestMissingPersons:
    @pytest.fixture
    def report(self):
        return {
            "name": "Ravi Kumar",
            "age": 12,
            "gender": "Male",
            "lastSeen": "2024-05-01",
            "location": "Central Bus Stand",
            "reporter_mobile": "9123456780",
        }

    def test_submit_and_list(self, client, report):
        response = client.post("/submit-missing-person", json=report)
        body = response.get_json()

        assert response.status_code == 200
        assert body["caseId"].startswith("CASE-")

        listed = client.get("/missing-persons").get_json()["missing_persons"]
        assert listed[0]["status"] == "Active"
        assert listed[0]["last_seen_date"] == "2024-05-01"

    def test_bad_date(self, client, report):
        report["lastSeen"] = "May 1st"

        response = client.post("/submit-missing-person", json=report)

        assert response.status_code == 400
        assert response.get_json()["success"] is False


class TestHomeAndRegistrants:
    def test_stats(self, client, sample_complaint_form):
        _submit(client, sample_complaint_form)
        _submit(client, sample_complaint_form)
        client.post("/mark-resolved/1")

        assert client.get("/").get_json()["stats"] == {"total": 2, "resolved": 1, "pending": 1}

    def test_user_login_redirects(self, client):
        response = client.post(
            "/userLogin",
            data={
                "first_name": "Meera",
                "last_name": "Iyer",
                "gender": "Female",
                "age": "34",
                "email_id": "meera.iyer@civicmail.in",
                "address": "12 Lake View Road",
            },
        )

        assert response.status_code == 302
        assert "login=success" in response.headers["Location"]
        users = client.get("/api/users").get_json()["data"]
        assert users[0]["email_id"] == "meera.iyer@civicmail.in"

    def test_user_login_age_out_of_range(self, client):
        response = client.post(
            "/userLogin",
            data={
                "first_name": "Tiny",
                "last_name": "Tim",
                "gender": "Male",
                "age": "3",
                "email_id": "tim@civicmail.in",
                "address": "Lane 4",
            },
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "Age must be between 5 and 120."

    def test_user_login_missing_fields(self, client):
        response = client.post("/userLogin", data={"first_name": "Meera"})
        assert response.status_code == 400
        assert response.get_json()["message"] == "All fields are required"


class TestContactOtp:
    def test_valid(self, client):
        body = client.post("/send-otp", json={"mobile": "9876543210"}).get_json()
        assert body["success"] is True
        assert len(body["otp"]) == 6

    def test_invalid(self, client):
        response = client.post("/send-otp", json={"mobile": "123"})
        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid mobile number."

    def test_echo_disabled(self, app_factory):
        client = app_factory(OTP_ECHO_IN_RESPONSE=False).test_client()
        body = client.post("/send-otp", json={"mobile": "9876543210"}).get_json()
        assert "otp" not in body


ADMIN_FORM = {
    "name": "Asha Verma",
    "department_name": "Public Works",
    "department_id": "PWD-001",
    "mobile_no": "9000000001",
}


class TestAdmin:
    def test_login_requires_all_fields(self, client):
        response = client.post("/adminLogin", json=dict(ADMIN_FORM, department_id=""))
        assert response.status_code == 400
        assert response.get_json()["message"] == "All fields are required"

    def test_otp_flow_redirects_to_dashboard(self, client):
        issued = client.post("/adminLogin", json=ADMIN_FORM).get_json()
        assert issued["message"] == "OTP generated. It is valid for 5 minutes."

        response = client.post("/verify-admin-otp", json={"otpInput": issued["otp"]})

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/adminDashboard")

    def test_wrong_otp(self, client):
        client.post("/adminLogin", json=ADMIN_FORM)

        response = client.post("/verify-admin-otp", json={"otpInput": "not-a-code"})

        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid or expired OTP"

    def test_dashboard_lists_cases(self, client, sample_complaint_form):
        case_id = _submit(client, sample_complaint_form)

        body = client.get("/adminDashboard").get_json()

        assert [c["case_id"] for c in body["complaints"]] == [case_id]
        assert body["missing_persons"] == []

    def test_mark_resolved(self, client, sample_complaint_form):
        case_id = _submit(client, sample_complaint_form)
        row_id = client.get("/adminDashboard").get_json()["complaints"][0]["id"]

        assert client.post(f"/mark-resolved/{row_id}").get_json() == {"success": True}
        assert client.post(f"/mark-resolved/{row_id}").get_json() == {"success": True}
        tracked = client.post("/trackStatus", json={"caseId": case_id}).get_json()
        assert tracked["complaint"]["status"] == "Resolved"

    def test_mark_resolved_unknown(self, client):
        assert client.post("/mark-resolved/999").get_json() == {"success": False}
        assert client.post("/mark-resolved/abc").get_json() == {"success": False}

    def test_admin_listing(self, client):
        client.post("/adminLogin", json=ADMIN_FORM)
        admins = client.get("/api/admins").get_json()["data"]
        assert admins[0]["mobile_no"] == "9000000001"
        assert "otp_hash" not in admins[0]


class TestAdminSessionEnforced:
    @pytest.fixture
    def staff_client(self, app_factory):
        return app_factory(ADMIN_SESSION_REQUIRED=True).test_client()

    def test_dashboard_requires_sign_in(self, staff_client):
        response = staff_client.get("/adminDashboard")
        assert response.status_code == 401

    def test_mark_resolved_requires_sign_in(self, staff_client):
        assert staff_client.post("/mark-resolved/1").status_code == 401

    def test_sign_in_unlocks_dashboard(self, staff_client):
        otp = staff_client.post("/adminLogin", json=ADMIN_FORM).get_json()["otp"]

        response = staff_client.post("/verify-admin-otp", json={"otpInput": otp})
        assert response.status_code == 302

        assert staff_client.get("/adminDashboard").status_code == 200

    def test_logout_locks_again(self, staff_client):
        otp = staff_client.post("/adminLogin", json=ADMIN_FORM).get_json()["otp"]
        staff_client.post("/verify-admin-otp", json={"otpInput": otp})

        staff_client.post("/logout")

        assert staff_client.get("/adminDashboard").status_code == 401


class TestErrorsAndHeaders:
    def test_unknown_route_is_json(self, client):
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        assert response.get_json() == {"success": False, "message": "Not found"}

    def test_security_headers(self, client):
        response = client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


class TestJsonValueTypes:
    """Numbers and other non-string JSON values are read as text."""

    def test_numeric_subject(self, client, sample_complaint_form):
        response = client.post("/submitComplaint", json=dict(sample_complaint_form, subject=12345))

        assert response.status_code == 200
        assert response.get_json()["subject"] == "12345"

    def test_numeric_admin_name(self, client):
        response = client.post("/adminLogin", json=dict(ADMIN_FORM, name=7, department_id=42))

        assert response.status_code == 200
        assert response.get_json()["success"] is True

    def test_numeric_last_seen_date(self, client):
        response = client.post(
            "/submit-missing-person",
            json={
                "name": "Ravi Kumar",
                "age": "12",
                "gender": "Male",
                "lastSeen": 20240501,
                "location": "Central Bus Stand",
                "reporter_mobile": 9123456780,
            },
        )

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_null_field_counts_as_missing(self, client, sample_complaint_form):
        response = client.post("/submitComplaint", json=dict(sample_complaint_form, category=None))

        assert response.status_code == 400
        assert response.get_json()["fields"] == ["category"]

    def test_non_object_body(self, client):
        response = client.post("/submitComplaint", json=["Pothole", "Roads"])

        assert response.status_code == 400
        assert response.get_json()["message"] == "Missing required fields."


class TestStoreErrorsOverHttp:
    """Store and conflict failures map to stable responses."""

    def test_home_stats_fall_back_to_zero(self, client, monkeypatch):
        def unavailable(kind):
            raise CaseStoreError()

        monkeypatch.setattr("utils.case_tracking.count_by_status", unavailable)

        response = client.get("/")

        assert response.status_code == 200
        assert response.get_json()["stats"] == {"total": 0, "resolved": 0, "pending": 0}

    def test_submit_conflict_is_409(self, client, sample_complaint_form, monkeypatch):
        def exhausted(fields):
            raise CaseConflictError()

        monkeypatch.setattr("routes.complaints.create_complaint", exhausted)

        response = client.post("/submitComplaint", json=sample_complaint_form)

        assert response.status_code == 409
        assert response.get_json()["success"] is False

    def test_submit_store_error_is_500(self, client, sample_complaint_form, monkeypatch):
        def unavailable(fields):
            raise CaseStoreError()

        monkeypatch.setattr("routes.complaints.create_complaint", unavailable)

        response = client.post("/submitComplaint", json=sample_complaint_form)

        assert response.status_code == 500
        assert response.get_json()["message"] == "Error submitting complaint to the database."

    def test_mark_resolved_store_error(self, client, monkeypatch):
        def unavailable(row_id):
            raise CaseStoreError()

        monkeypatch.setattr("routes.admin.resolve_complaint", unavailable)

        response = client.post("/mark-resolved/1")

        assert response.status_code == 200
        assert response.get_json() == {"success": False}


class TestUploadCleanup:
    """Uploads are removed when the case record is not written."""

    @pytest.fixture
    def upload_dir(self, web_app):
        return web_app.config["MEDIA_UPLOAD_FOLDER"]

    def test_conflict_removes_upload(self, client, upload_dir, sample_complaint_form, png_bytes, monkeypatch):
        def exhausted(fields):
            assert len(os.listdir(upload_dir)) == 1
            raise CaseConflictError()

        monkeypatch.setattr("routes.complaints.create_complaint", exhausted)
        data = dict(sample_complaint_form, media=(io.BytesIO(png_bytes), "photo.png"))

        response = client.post("/submitComplaint", data=data, content_type="multipart/form-data")

        assert response.status_code == 409
        assert os.listdir(upload_dir) == []

    def test_missing_person_store_error_removes_upload(self, client, upload_dir, png_bytes, monkeypatch):
        def unavailable(fields):
            raise CaseStoreError()

        monkeypatch.setattr("routes.complaints.create_missing_person_case", unavailable)
        data = {
            "name": "Ravi Kumar",
            "age": "12",
            "gender": "Male",
            "lastSeen": "2024-05-01",
            "location": "Central Bus Stand",
            "reporter_mobile": "9123456780",
            "media": (io.BytesIO(png_bytes), "photo.png"),
        }

        response = client.post("/submit-missing-person", data=data, content_type="multipart/form-data")

        assert response.status_code == 500
        assert os.listdir(upload_dir) == []

    def test_successful_submission_keeps_upload(self, client, upload_dir, sample_complaint_form, png_bytes):
        data = dict(sample_complaint_form, media=(io.BytesIO(png_bytes), "photo.png"))

        response = client.post("/submitComplaint", data=data, content_type="multipart/form-data")

        assert response.status_code == 200
        assert len(os.listdir(upload_dir)) == 1
