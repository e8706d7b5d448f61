import io
import json
import textwrap

import fitz
import pytest

from config import Config
from cvchat import create_app
from cvchat.extensions import db
from cvchat.services import evidence_store, openai_service


class TestingConfig(Config):
    __test__ = False

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "testing-secret-key-that-is-long-enough-0001"
    JWT_SECRET_KEY = "testing-jwt-secret-key-that-is-long-enough-0001"
    BCRYPT_LOG_ROUNDS = 4
    OPENAI_API_KEY = "sk-test"
    RATE_LIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


SAMPLE_CV = {
    "person": {
        "name": "John Doe",
        "title": "Software Engineer",
        "location": "Vienna",
        "summary": "Backend engineer focused on Python services.",
    },
    "skills": ["Python", "Flask", "PostgreSQL"],
    "experience": [
        {
            "organization": "Acme GmbH",
            "role": "Backend Developer",
            "start": "2019",
            "end": "2023",
            "tasks": ["Built REST APIs", "Maintained CI pipelines"],
            "keywords": ["Python", "Docker"],
        }
    ],
    "education": [{"institution": "TU Wien", "degree": "BSc Computer Science"}],
    "certificates": [],
    "languages": [{"language": "German", "level": "native"}, "English"],
}

SAMPLE_CERTIFICATE = {"title": "AWS Certified Developer", "issuer": "Amazon Web Services", "date": "2022"}

CV_TEXT = (
    "John Doe, Software Engineer. Vienna. Backend engineer focused on Python services. "
    "Acme GmbH, Backend Developer 2019-2023: built REST APIs and maintained CI pipelines. "
    "Skills: Python, Flask, PostgreSQL."
)


class FakeLLM:
    """Stands in for openai_service.complete_chat with scripted replies."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)
        return self

    def __call__(self, prompt, question=None, timeout=20, temperature=0):
        self.calls.append({"prompt": prompt, "question": question, "timeout": timeout, "temperature": temperature})
        if not self.replies:
            raise AssertionError("unexpected completion call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prompt, question)
        return reply


def make_pdf(text=""):
    """Build a real one-page PDF carrying `text`, wrapped to fit the page."""
    doc = fitz.open()
    page = doc.new_page()
    y = 72
    for line in textwrap.wrap(text, 60):
        page.insert_text((72, y), line, fontsize=10)
        y += 14
    data = doc.tobytes()
    doc.close()
    return data


def pdf_file(data, name="document.pdf", mimetype="application/pdf"):
    return (io.BytesIO(data), name, mimetype)


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_llm(monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(openai_service, "complete_chat", fake)
    return fake


@pytest.fixture
def cv_json():
    return json.dumps(SAMPLE_CV)


@pytest.fixture
def make_profile(app):
    """Create a stored profile directly and return its token."""
    def _make(cv_data=None, user_id=None, certificates=(), references=(), additional_text=None):
        with app.app_context():
            cv = evidence_store.create_profile(
                cv_data or SAMPLE_CV,
                user_id=user_id,
                certificates=certificates,
                references=references,
                additional_text=additional_text,
            )
            return cv.token
    return _make


@pytest.fixture
def register(client):
    """Register a user through the API and return (user payload, auth headers)."""
    def _register(email="jane@example.com", password="secret123", name="Jane Roe", token=None):
        body = {"email": email, "password": password, "name": name}
        if token:
            body["token"] = token
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 200, response.get_json()
        payload = response.get_json()
        return payload["user"], {"Authorization": f"Bearer {payload['accessToken']}"}
    return _register
