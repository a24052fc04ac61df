"""Outbound transactional email through the Resend HTTP API."""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

RESEND_API = "https://api.resend.com/emails"

RESET_SUBJECT = "Password recovery - MyClass"

RESET_TEXT = """Hello {name},

You asked to recover the password of your MyClass account.

Verification code: {code}

This code expires in {minutes} minutes. Never share it with anyone.
If you did not ask for this, you can ignore this email.

The MyClass team
"""

RESET_HTML = """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #007bff;">MyClass password recovery</h2>
  <p>Hello {name},</p>
  <p>You asked to recover the password of your MyClass account.</p>
  <p style="font-size: 32px; font-weight: bold; letter-spacing: 8px;">{code}</p>
  <p><strong>This code expires in {minutes} minutes.</strong> Never share it with anyone.</p>
  <p>If you did not ask for this, you can ignore this email.</p>
  <p>The MyClass team</p>
</div>
"""


class MailDeliveryError(Exception):
    """Raised when an email could not be handed to the provider."""


class ResendMailer:
    """Send password-reset codes with an explicit request timeout."""

    def __init__(self, api_key: str, sender: str, timeout: float = 10.0):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def is_configured(self) -> bool:
        return self.api_key.startswith("re_")

    def send_password_reset(
        self, email: str, code: str, name: Optional[str] = None, minutes: int = 60
    ) -> str:
        """Send the reset email and return the provider's message id."""
        if not self.is_configured():
            raise MailDeliveryError("RESEND_API_KEY is missing or malformed")

        greeting = name or "dear user"
        payload = {
            "from": self.sender,
            "to": [email],
            "subject": RESET_SUBJECT,
            "html": RESET_HTML.format(name=greeting, code=code, minutes=minutes),
            "text": RESET_TEXT.format(name=greeting, code=code, minutes=minutes),
        }
        try:
            response = requests.post(
                RESEND_API,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            message_id = response.json().get("id")
        except (requests.RequestException, ValueError) as exc:
            raise MailDeliveryError(str(exc)) from exc

        if not message_id:
            raise MailDeliveryError("provider returned no message id")
        logger.info("password reset email queued for delivery id=%s", message_id)
        return message_id
