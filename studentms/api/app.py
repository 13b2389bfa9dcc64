"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import func, select

from studentms import __version__
from studentms.api.dependencies import get_current_active_user
from studentms.api.middleware import BodySizeLimitMiddleware, RequestContextMiddleware
from studentms.api.routers import (
    assignments,
    attendance,
    courses,
    fees,
    grades,
    students,
    submissions,
    timetable,
)
from studentms.api.routers import auth as auth_router
from studentms.api.routers import users as users_router
from studentms.core.auth import hash_password
from studentms.core.config import Settings, get_settings
from studentms.core.database import close_engine, get_engine, get_session_factory
from studentms.core.limiter import limiter
from studentms.core.logging import REQUEST_ID_HEADER, configure_logging, get_logger
from studentms.core.oauth import GoogleOAuthClient

logger = get_logger(__name__)

API_PREFIX = "/api/v1"

RESOURCE_ROUTERS = (
    students.router,
    courses.router,
    grades.router,
    attendance.router,
    timetable.router,
    assignments.router,
    submissions.router,
    fees.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    configure_logging()
    settings = get_settings()
    logger.info("Starting studentms", debug=settings.app_debug)

    # Warm up DB connection pool; the schema itself is managed by Alembic
    get_engine()

    await _bootstrap_admin(settings)

    if not app.state.google_oauth.configured:
        logger.warning("Google OAuth client id/secret not set, /auth/google will deny logins")

    yield

    await app.state.google_oauth.aclose()
    await close_engine()
    logger.info("studentms stopped")


async def _bootstrap_admin(settings: Settings) -> None:
    """Create the default admin account on first start (no users in DB)."""
    from studentms.models.user import User

    factory = get_session_factory()
    async with factory() as session:
        count = (await session.execute(select(func.count()).select_from(User))).scalar_one()
        if count == 0:
            admin = User(
                email=settings.admin_email.lower(),
                username="admin",
                full_name="Administrator",
                hashed_password=hash_password(settings.admin_password),
                role="admin",
                is_active=True,
                is_verified=True,
                auth_provider="local",
            )
            session.add(admin)
            await session.commit()
            logger.info(
                "Bootstrap admin created",
                email=settings.admin_email,
                hint="Change the default password immediately!",
            )


def create_app(google_oauth: GoogleOAuthClient | None = None) -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Student Management API",
        description="Students, courses, grades, attendance, timetables, coursework and fees",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Injected so tests (and alternative deployments) can supply their own client
    app.state.google_oauth = google_oauth or GoogleOAuthClient.from_settings(settings)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    # Outermost, so rejected and CORS preflight responses carry the id too
    app.add_middleware(RequestContextMiddleware)

    # Google sign-in lives outside the versioned API
    app.include_router(auth_router.router)

    # Register/login are public; the rest of the users router self-guards
    app.include_router(users_router.router, prefix=API_PREFIX)

    _auth = [Depends(get_current_active_user)]
    for router in RESOURCE_ROUTERS:
        app.include_router(router, prefix=API_PREFIX, dependencies=_auth)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return "Server is live"

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
