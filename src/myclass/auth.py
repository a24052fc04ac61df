from typing import Generator, Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .errors import AuthenticationError, Forbidden
from .security import Identity
from .services import (
    AccountService,
    CatalogService,
    ContactService,
    PreferenceService,
    ReportingService,
)
from .storage import FileStorage

security = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """One session per request, always closed."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_preferences(request: Request) -> PreferenceService:
    return request.app.state.preferences


def get_contact(request: Request) -> ContactService:
    return request.app.state.contact


def get_reporting(request: Request) -> ReportingService:
    return request.app.state.reporting


def get_current_user(
    x_auth_token: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    accounts: AccountService = Depends(get_accounts),
) -> Identity:
    """Resolve the caller from ``x-auth-token`` or an ``Authorization: Bearer`` header."""
    token = x_auth_token or (credentials.credentials if credentials else None)
    if not token:
        raise AuthenticationError("Access denied, no token provided")
    return accounts.verify(token)


def require_admin(current_user: Identity = Depends(get_current_user)) -> Identity:
    if not current_user.is_admin:
        raise Forbidden()
    return current_user
