import pytest
from fastapi.testclient import TestClient

from conftest import PASSWORD, register
from myclass.api import create_app
from myclass.ratelimit import limiter


@pytest.fixture
def limited_client(settings, mailer):
    settings.rate_limit_enabled = True
    limiter.reset()
    app = create_app(settings, mailer=mailer)
    yield TestClient(app)
    limiter.reset()
    limiter.enabled = False


def statuses(send, count=7):
    return [send().status_code for _ in range(count)]


def test_login_limited_after_five_attempts(limited_client):
    codes = statuses(
        lambda: limited_client.post(
            "/login", json={"email": "ghost@example.com", "password": PASSWORD}
        )
    )
    assert codes[:5] == [401] * 5
    assert codes[5:] == [429, 429]


def test_register_limited_after_five_attempts(limited_client):
    counter = iter(range(100))

    def send():
        n = next(counter)
        return limited_client.post(
            "/inscription",
            json={
                "first_name": "A",
                "last_name": "B",
                "email": f"user{n}@example.com",
                "password": PASSWORD,
            },
        )

    codes = statuses(send)
    assert codes[:5] == [201] * 5
    assert codes[5] == 429


def test_forgot_password_limited(limited_client):
    codes = statuses(
        lambda: limited_client.post("/forgot-password", json={"email": "ghost@example.com"})
    )
    assert codes[:5] == [404] * 5
    assert codes[5] == 429


def test_reset_code_guessing_is_throttled(limited_client):
    guesses = iter(range(100000, 100100))
    codes = statuses(lambda: limited_client.get(f"/verify-reset-token/{next(guesses)}"))
    assert codes[:5] == [400] * 5
    assert codes[5:] == [429, 429]

    codes = statuses(
        lambda: limited_client.post(
            "/reset-password", json={"token": str(next(guesses)), "new_password": "guess-pass"}
        )
    )
    assert codes[:5] == [400] * 5
    assert codes[5:] == [429, 429]


def test_disabled_limiter_lets_requests_through(client):
    register(client)
    codes = statuses(
        lambda: client.post("/login", json={"email": "student@example.com", "password": "nope-nope"})
    )
    assert codes == [401] * 7


def test_app_uses_process_wide_limiter(limited_client):
    assert limited_client.app.state.limiter is limiter
    assert limiter.enabled is True
