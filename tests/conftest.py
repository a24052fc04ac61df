import pytest
from fastapi.testclient import TestClient

from myclass.api import create_app
from myclass.config import Settings
from myclass.mailer import MailDeliveryError
from myclass.models.user import ROLE_ADMIN, User

PASSWORD = "secret123"


class FakeMailer:
    """Records reset emails instead of calling the provider."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_password_reset(self, email, code, name=None, minutes=60):
        if self.fail:
            raise MailDeliveryError("provider unavailable")
        self.sent.append({"email": email, "code": code, "name": name, "minutes": minutes})
        return f"msg-{len(self.sent)}"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        rate_limit_enabled=False,
        expose_reset_code=True,
        max_upload_bytes=1024 * 1024,
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(settings, mailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


def register(client, email="student@example.com", password=PASSWORD, **fields):
    body = {"first_name": "Sara", "last_name": "Benali", "email": email, "password": password}
    body.update(fields)
    resp = client.post("/inscription", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["user_id"]


def login(client, email="student@example.com", password=PASSWORD):
    resp = client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def promote(app, user_id):
    session = app.state.session_factory()
    try:
        session.get(User, user_id).role = ROLE_ADMIN
        session.commit()
    finally:
        session.close()


@pytest.fixture
def student(client):
    user_id = register(client)
    return user_id, login(client)


@pytest.fixture
def admin(app, client):
    user_id = register(client, email="admin@example.com", first_name="Admin", last_name="Root")
    promote(app, user_id)
    return user_id, login(client, email="admin@example.com")
