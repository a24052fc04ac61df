"""Password hashing and stateless session tokens."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from .errors import InvalidToken


def build_password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


@dataclass(frozen=True)
class Identity:
    """Who a verified token belongs to."""

    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SessionIssuer:
    """Issue and verify signed bearer tokens carrying identity and role.

    Tokens are stateless: there is no server-side revocation list, so logging
    out is the client discarding its token.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=expire_minutes)

    def issue(self, user_id: int, email: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "id": user_id,
            "email": email,
            "role": role,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise InvalidToken("Token has expired, please log in again")
        except jwt.PyJWTError:
            raise InvalidToken()

        user_id = payload.get("id")
        email = payload.get("email")
        role = payload.get("role")
        if not isinstance(user_id, int) or not email or not role:
            raise InvalidToken("Malformed token")
        return Identity(id=user_id, email=email, role=role)
