"""Registration, login and password recovery."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..auth import get_accounts, get_current_user, get_db
from ..ratelimit import SENSITIVE_HOURLY_RATE_LIMIT, SENSITIVE_RATE_LIMIT, limiter
from ..schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UserSummary,
    VerifyResetTokenResponse,
)
from ..security import Identity
from ..services import AccountService

router = APIRouter(tags=["auth"])


@router.post(
    "/inscription",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(SENSITIVE_RATE_LIMIT)
@limiter.limit(SENSITIVE_HOURLY_RATE_LIMIT)
def register(
    request: Request,
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    profile = payload.model_dump(exclude={"email", "password"})
    user_id = accounts.register(db, payload.email, payload.password, profile)
    return RegisterResponse(message="Registration successful", user_id=user_id)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(SENSITIVE_RATE_LIMIT)
@limiter.limit(SENSITIVE_HOURLY_RATE_LIMIT)
def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    token, user = accounts.authenticate(db, payload.email, payload.password)
    return LoginResponse(token=token, user=UserSummary.model_validate(user))


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
@limiter.limit(SENSITIVE_RATE_LIMIT)
@limiter.limit(SENSITIVE_HOURLY_RATE_LIMIT)
def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    code, sent = accounts.request_password_reset(db, payload.email)
    if sent:
        message = "A reset code has been sent to your email"
    else:
        message = "A reset code was generated but the email could not be sent"
    expose = request.app.state.settings.expose_reset_code
    return ForgotPasswordResponse(
        message=message,
        email_sent=sent,
        reset_token=code if expose else None,
    )


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(SENSITIVE_RATE_LIMIT)
@limiter.limit(SENSITIVE_HOURLY_RATE_LIMIT)
def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    accounts.reset_password(db, payload.token.strip(), payload.new_password)
    return MessageResponse(message="Password reset successfully")


@router.get("/verify-reset-token/{token}", response_model=VerifyResetTokenResponse)
@limiter.limit(SENSITIVE_RATE_LIMIT)
@limiter.limit(SENSITIVE_HOURLY_RATE_LIMIT)
def verify_reset_token(
    request: Request,
    token: str,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    email = accounts.verify_reset_code(db, token.strip())
    return VerifyResetTokenResponse(message="Valid reset code", email=email)


@router.post("/change-password", response_model=MessageResponse)
@router.post("/users/change-password", response_model=MessageResponse, include_in_schema=False)
def change_password(
    payload: ChangePasswordRequest,
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_accounts),
):
    accounts.change_password(db, current_user, payload.current_password, payload.new_password)
    return MessageResponse(message="Password changed successfully")
