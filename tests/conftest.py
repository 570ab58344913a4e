import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from database import get_db, init_db
from mailer import Mailer, get_mailer
from main import app
from services.payments import PaymentSimulator, get_payment_simulator
from sessions import InMemorySessionStore, get_session_store


class RecordingMailer(Mailer):
    def __init__(self):
        self.sent = []
        self.fail_with = None

    def send(self, to, subject, html):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "html": html})


class FixedPayment(PaymentSimulator):
    def __init__(self):
        super().__init__(delay=0)
        self.outcomes = []

    def attempt(self):
        return self.outcomes.pop(0) if self.outcomes else True


@pytest.fixture
def settings(tmp_path):
    sticker = tmp_path / "sticker.png"
    sticker.write_bytes(b"\x89PNG\r\n\x1a\nsticker")
    return Settings(
        SESSION_SECRET="test-secret",
        SESSION_BACKEND="memory",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        STICKER_PATH=str(sticker),
        PAYMENT_DELAY_SECONDS=0,
        RESET_URL_BASE="https://pingme.test/reset-password",
    )


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["pingme_test"]
    init_db(db)
    return db


@pytest.fixture
def session_store(settings):
    return InMemorySessionStore(settings.SESSION_TTL_SECONDS)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def payment():
    return FixedPayment()


@pytest.fixture
def client(settings, mongo_db, session_store, mailer, payment):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_db] = lambda: mongo_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_payment_simulator] = lambda: payment
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def page_client(client, settings):
    page_settings = settings.model_copy(update={"RESPONSE_MODE": "page"})
    app.dependency_overrides[get_settings] = lambda: page_settings
    client.follow_redirects = False
    return client


def signup(client, username="a", email="a@x.com", password="pw"):
    return client.post("/signup", json={"username": username, "email": email, "password": password})


def login(client, email="a@x.com", password="pw"):
    return client.post("/login", json={"email": email, "password": password})


@pytest.fixture
def logged_in(client):
    signup(client)
    response = login(client)
    assert response.status_code == 200
    return response.json()["user"]
