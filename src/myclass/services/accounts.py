"""Service layer for accounts: registration, login, password recovery, profile."""

import logging
import secrets
from datetime import timedelta
from typing import Dict, Tuple

from passlib.context import CryptContext
from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..attachments import PROFILE_PHOTO, AttachedFileManager
from ..database import utcnow
from ..errors import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidResetCode,
    NotFound,
    PersistenceError,
    ValidationError,
)
from ..mailer import MailDeliveryError
from ..models.user import ROLE_STUDENT, User
from ..security import Identity, SessionIssuer
from ..storage import StagedFile

logger = logging.getLogger(__name__)

REGISTRATION_COUNTER = Counter("user_registrations_total", "Total accounts registered")
LOGIN_FAILURE_COUNTER = Counter("login_failures_total", "Total rejected login attempts")
RESET_REQUEST_COUNTER = Counter(
    "password_reset_requests_total", "Password reset codes issued", ["email_sent"]
)

PROFILE_COLUMNS = (
    "first_name",
    "last_name",
    "birth_date",
    "level",
    "track",
    "school",
    "phone",
    "country",
    "city",
)


def generate_reset_code() -> str:
    """Six-digit numeric code from a cryptographic source."""
    return str(100000 + secrets.randbelow(900000))


def _commit(session: Session, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("failed to %s", action)
        raise PersistenceError(f"Could not {action}") from exc


class AccountService:
    """Credential store plus the session issuer and password recovery."""

    def __init__(
        self,
        passwords: CryptContext,
        issuer: SessionIssuer,
        files: AttachedFileManager,
        mailer=None,
        reset_ttl_minutes: int = 60,
    ):
        self.passwords = passwords
        self.issuer = issuer
        self.files = files
        self.mailer = mailer
        self.reset_ttl = timedelta(minutes=reset_ttl_minutes)

    # ------------------------------------------------------------ credentials

    def register(self, session: Session, email: str, password: str, profile: Dict) -> int:
        """Create a student account and return its id."""
        if session.query(User.id).filter(User.email == email).first():
            raise DuplicateEmail()

        values = {k: v for k, v in profile.items() if k in PROFILE_COLUMNS and v is not None}
        user = User(
            email=email,
            password_hash=self.passwords.hash(password),
            role=ROLE_STUDENT,
            **values,
        )
        session.add(user)
        try:
            session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email.
            session.rollback()
            raise DuplicateEmail() from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to register user")
            raise PersistenceError("Could not register user") from exc

        REGISTRATION_COUNTER.inc()
        logger.info("registered user %s", user.id)
        return user.id

    def authenticate(self, session: Session, email: str, password: str) -> Tuple[str, User]:
        """Return a signed token for valid credentials."""
        user = session.query(User).filter(User.email == email).first()
        if user is None or not self.passwords.verify(password, user.password_hash):
            LOGIN_FAILURE_COUNTER.inc()
            raise InvalidCredentials()
        token = self.issuer.issue(user.id, user.email, user.role)
        logger.info("user %s logged in", user.id)
        return token, user

    def verify(self, token: str) -> Identity:
        return self.issuer.verify(token)

    def change_password(self, session: Session, identity: Identity, current: str, new: str) -> None:
        user = self.get_user(session, identity.id)
        if not self.passwords.verify(current, user.password_hash):
            raise ValidationError("Current password is incorrect")
        if current == new:
            raise ValidationError("New password must differ from the current one")
        user.password_hash = self.passwords.hash(new)
        _commit(session, "change password")
        logger.info("user %s changed password", user.id)

    # ------------------------------------------------------------ recovery

    def request_password_reset(self, session: Session, email: str) -> Tuple[str, bool]:
        """Store a fresh reset code for ``email`` and try to mail it.

        Any previous code for the user is overwritten. Returns the code and
        whether the email was handed to the provider; a delivery failure does
        not undo the stored code.
        """
        user = session.query(User).filter(User.email == email).first()
        if user is None:
            raise NotFound("No account is associated with this email")

        now = utcnow()
        code = generate_reset_code()
        # Keep active codes unique so a code identifies exactly one user.
        while (
            session.query(User.id)
            .filter(User.reset_token == code, User.reset_expires > now, User.id != user.id)
            .first()
        ):
            code = generate_reset_code()

        user.reset_token = code
        user.reset_expires = now + self.reset_ttl
        _commit(session, "store reset code")

        sent = self._send_reset_email(user, code)
        RESET_REQUEST_COUNTER.labels(email_sent=str(sent).lower()).inc()
        return code, sent

    def _send_reset_email(self, user: User, code: str) -> bool:
        if self.mailer is None:
            logger.warning("no mailer configured, reset code for user %s not sent", user.id)
            return False
        name = f"{user.first_name} {user.last_name}".strip()
        minutes = int(self.reset_ttl.total_seconds() // 60)
        try:
            self.mailer.send_password_reset(user.email, code, name=name, minutes=minutes)
        except MailDeliveryError:
            logger.warning("reset email for user %s not delivered", user.id, exc_info=True)
            return False
        return True

    def _user_for_code(self, session: Session, code: str) -> User:
        user = (
            session.query(User)
            .filter(User.reset_token == code, User.reset_expires > utcnow())
            .first()
        )
        if user is None:
            raise InvalidResetCode()
        return user

    def verify_reset_code(self, session: Session, code: str) -> str:
        """Return the email owning an active reset code."""
        return self._user_for_code(session, code).email

    def reset_password(self, session: Session, code: str, new_password: str) -> None:
        """Redeem a reset code; it can be used exactly once."""
        user = self._user_for_code(session, code)
        user.password_hash = self.passwords.hash(new_password)
        user.reset_token = None
        user.reset_expires = None
        _commit(session, "reset password")
        logger.info("user %s reset password", user.id)

    # ------------------------------------------------------------ profile

    def get_user(self, session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, session: Session, user_id: int, changes: Dict) -> User:
        user = self.get_user(session, user_id)
        for column, value in changes.items():
            if column in PROFILE_COLUMNS:
                setattr(user, column, value)
        if not (user.first_name or "").strip() or not (user.last_name or "").strip():
            session.rollback()
            raise ValidationError("First and last name cannot be empty")
        _commit(session, "update profile")
        return user

    def set_photo(self, session: Session, user_id: int, staged: StagedFile) -> User:
        """Point the profile at a newly staged photo; the old one goes after commit."""
        return self.files.update(session, User, user_id, {}, PROFILE_PHOTO, staged=staged)

    def delete_photo(self, session: Session, user_id: int) -> User:
        return self.files.detach(session, User, user_id, PROFILE_PHOTO)

