import pytest
import requests

from myclass import mailer as mailer_module
from myclass.mailer import MailDeliveryError, ResendMailer


class DummyResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_send_password_reset(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return DummyResponse({"id": "abc"})

    monkeypatch.setattr(mailer_module.requests, "post", fake_post)
    mailer = ResendMailer("re_test", "MyClass <noreply@example.com>", timeout=3)

    assert mailer.send_password_reset("a@example.com", "123456", name="Sara") == "abc"
    call = calls[0]
    assert call["url"] == mailer_module.RESEND_API
    assert call["timeout"] == 3
    assert call["json"]["to"] == ["a@example.com"]
    assert "123456" in call["json"]["text"]
    assert call["headers"]["Authorization"] == "Bearer re_test"


def test_provider_error_raises(monkeypatch):
    monkeypatch.setattr(
        mailer_module.requests, "post", lambda *a, **kw: DummyResponse({}, status=500)
    )
    with pytest.raises(MailDeliveryError):
        ResendMailer("re_test", "x@example.com").send_password_reset("a@example.com", "1")


def test_timeout_raises(monkeypatch):
    def slow_post(*args, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(mailer_module.requests, "post", slow_post)
    with pytest.raises(MailDeliveryError):
        ResendMailer("re_test", "x@example.com").send_password_reset("a@example.com", "1")


def test_missing_key_not_configured():
    mailer = ResendMailer("", "x@example.com")
    assert not mailer.is_configured()
    with pytest.raises(MailDeliveryError):
        mailer.send_password_reset("a@example.com", "1")
