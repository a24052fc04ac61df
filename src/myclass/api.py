"""FastAPI application factory for the MyClass backend."""

import logging
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import Counter, make_asgi_app
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from .attachments import AttachedFileManager
from .config import Settings, settings as default_settings
from .database import init_db, make_engine, make_session_factory
from .errors import AppError, UnexpectedError, ValidationError
from .mailer import ResendMailer
from .ratelimit import limiter
from .routes import (
    admin_routes,
    announcement_routes,
    auth_routes,
    contact_routes,
    course_routes,
    profile_routes,
    settings_routes,
)
from .security import SessionIssuer, build_password_context
from .services import (
    AccountService,
    CatalogService,
    ContactService,
    PreferenceService,
    ReportingService,
)
from .storage import PUBLIC_PREFIX, FileStorage

logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


def _error_body(code: str, detail) -> dict:
    return {"error": code, "detail": detail}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.detail),
        headers=exc.headers,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and static-file misses in the API error shape."""
    try:
        code = HTTPStatus(exc.status_code).phrase.replace(" ", "").replace("-", "")
    except ValueError:
        code = "HTTPError"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=_error_body(ValidationError.__name__, errors),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=UnexpectedError.status_code,
        content=_error_body(UnexpectedError.__name__, UnexpectedError.default_detail),
    )


def route_label(request: Request) -> str:
    """Template of the matched route, or ``unmatched``."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    mailer=None,
) -> FastAPI:
    """Build the application and its services from ``settings``."""
    settings = settings or default_settings
    logging.getLogger("myclass").setLevel(settings.log_level.upper())

    engine = engine or make_engine(settings.database_url)
    if settings.auto_create_tables:
        init_db(engine)

    storage = FileStorage(settings.upload_dir, settings.max_upload_bytes)
    storage.ensure_root()
    files = AttachedFileManager(storage)
    if mailer is None:
        mailer = ResendMailer(
            settings.resend_api_key,
            settings.email_from,
            timeout=settings.email_timeout_seconds,
        )

    app = FastAPI(title=settings.api_title)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.storage = storage
    app.state.accounts = AccountService(
        build_password_context(settings.bcrypt_rounds),
        SessionIssuer(
            settings.jwt_secret,
            settings.jwt_algorithm,
            settings.access_token_expire_minutes,
        ),
        files,
        mailer=mailer,
        reset_ttl_minutes=settings.reset_code_ttl_minutes,
    )
    app.state.catalog = CatalogService(files)
    app.state.preferences = PreferenceService()
    app.state.contact = ContactService()
    app.state.reporting = ReportingService(files)

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log incoming requests and their outcomes while updating metrics."""
        logger.info("request %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception:
            REQUEST_COUNTER.labels(
                method=request.method,
                endpoint=route_label(request),
                status="500",
            ).inc()
            logger.exception("error handling %s %s", request.method, request.url.path)
            raise
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=route_label(request),
            status=str(response.status_code),
        ).inc()
        logger.info(
            "response %s %s status %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    @app.get("/", tags=["health"])
    def root():
        return {"status": "MyClass API running"}

    for module in (
        auth_routes,
        profile_routes,
        course_routes,
        announcement_routes,
        settings_routes,
        contact_routes,
        admin_routes,
    ):
        app.include_router(module.router)

    app.mount("/metrics", make_asgi_app())
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(storage.root)), name="uploads")
    logger.info("application created (database=%s)", engine.url.render_as_string(hide_password=True))
    return app
