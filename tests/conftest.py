"""
Shared test fixtures.

Provides an in-memory SQLite database behind the get_db dependency, a
TestClient, user/token helpers and fakes for the speech provider, the
Gemini client and outgoing e-mail.
"""
import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
_test_files_dir = tempfile.mkdtemp(prefix="summavoice_test_")
os.environ["APP_ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-purposes-only"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOADS_DIR"] = os.path.join(_test_files_dir, "uploads")
os.environ["AUDIO_DIR"] = os.path.join(_test_files_dir, "output")
os.environ["EMAIL_BACKEND"] = "console"
os.environ["GOOGLE_AI_API_KEY"] = ""
os.environ["VOICE_RSS_API_KEY"] = "test-key"

from summavoice import ai, auth, config, crud, mailer, models, schemas, storage, tts  # noqa: E402
from summavoice.database import get_db  # noqa: E402
from summavoice.errors import ApiError  # noqa: E402
from summavoice.main import app  # noqa: E402

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def database():
    models.Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()
    models.Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(autouse=True)
def file_dirs(tmp_path, monkeypatch):
    uploads = tmp_path / "uploads"
    output = tmp_path / "output"
    monkeypatch.setattr(config, "UPLOADS_DIR", str(uploads))
    monkeypatch.setattr(config, "AUDIO_DIR", str(output))
    return uploads, output


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def make_user(db_session):
    def _make_user(email="alice@example.com", username="alice", password="secret123", **fields):
        user = crud.create_user(
            db_session,
            schemas.UserCreate(username=username, email=email, password=password),
            hashed_password=auth.hash_password(password),
        )
        for key, value in fields.items():
            setattr(user, key, value)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


def bearer(user):
    return {"Authorization": f"Bearer {auth.create_access_token(user)}"}


@pytest.fixture
def auth_headers(user):
    return bearer(user)


@pytest.fixture
def sent_emails(monkeypatch):
    outbox = []

    def fake_send_email(to, subject, html):
        outbox.append({"to": to, "subject": subject, "html": html})

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
    return outbox


class FakeProvider:
    name = "fake"

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []

    async def synthesize_chunk(self, text, language, voice_name, options):
        self.calls.append((text, language, voice_name))
        if self.fail_on and self.fail_on in text:
            raise ApiError(502, "Failed to generate speech: provider exploded")
        return f"<{text}>".encode()


@pytest.fixture
def fake_provider(monkeypatch):
    provider = FakeProvider()
    monkeypatch.setattr(tts, "get_provider", lambda: provider)
    # no ffmpeg needed for the fake audio
    monkeypatch.setattr(storage, "audio_duration", lambda audio, ext: 3)
    return provider


@pytest.fixture
def fake_ai(monkeypatch):
    prompts = []

    async def fake_generate_text(prompt, max_output_tokens=2048, temperature=0.7):
        prompts.append(prompt)
        if "key points" in prompt:
            return "- First point\n- Second point\n* Third point"
        return "Generated text"

    monkeypatch.setattr(ai, "generate_text", fake_generate_text)
    return prompts
