"""
Pytest configuration and fixtures.
"""

import io
from datetime import datetime

import pytest
from PIL import Image

from app import create_app
from extensions import db as _db


@pytest.fixture
def app_factory(tmp_path):
    """Build an app on in-memory SQLite; extra config goes in as keyword overrides."""
    created = []

    def _make(**overrides):
        settings = {
            "LOG_DIR": str(tmp_path / "logs"),
            "MEDIA_UPLOAD_FOLDER": str(tmp_path / "uploads"),
        }
        settings.update(overrides)
        application = create_app("testing", overrides=settings)
        created.append(application)
        return application

    yield _make

    for application in created:
        with application.app_context():
            _db.session.remove()
            _db.drop_all()


@pytest.fixture
def app(app_factory):
    """Application with an active app context for direct service calls."""
    application = app_factory()
    with application.app_context():
        yield application


@pytest.fixture
def web_app(app_factory):
    """Application for HTTP tests; each request pushes its own app context."""
    return app_factory()


@pytest.fixture
def client(web_app):
    return web_app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def sample_complaint_fields():
    """Complaint payload as the store receives it."""
    return {
        "subject": "Pothole",
        "description": "Large pothole",
        "category": "Roads",
        "location": "Main St",
        "contact": "9876543210",
    }


@pytest.fixture
def sample_complaint_form():
    """Complaint payload as the intake page posts it."""
    return {
        "subject": "Pothole",
        "description": "Large pothole",
        "category": "Roads",
        "location": "Main St",
        "mobile": "9876543210",
    }


@pytest.fixture
def sample_missing_person_fields():
    return {
        "name": "Ravi Kumar",
        "age": 12,
        "gender": "Male",
        "last_seen_date": "2024-05-01",
        "location": "Central Bus Stand",
        "description": "Blue school uniform",
        "reporter_contact": "9123456780",
    }


@pytest.fixture
def sample_admin():
    return {
        "name": "Asha Verma",
        "department_name": "Public Works",
        "department_id": "PWD-001",
        "mobile": "9000000001",
    }


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 1, 10, 0, 0)


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()
