"""FastAPI dependencies shared by the storefront routers."""

from datetime import UTC, datetime
from uuid import uuid4

from fastapi import Request, Response

from storefront.services import Services

SESSION_COOKIE = "cart_session"
SESSION_HEADER = "x-cart-session"
LEGACY_SESSION_HEADER = "x-session-id"
SESSION_MAX_AGE = 7 * 24 * 60 * 60


def get_services(request: Request) -> Services:
    return request.app.state.services


def resolve_session_id(request: Request) -> str:
    """Cart session from the explicit header, the cookie, or the legacy header; new one otherwise."""
    return (
        request.headers.get(SESSION_HEADER)
        or request.cookies.get(SESSION_COOKIE)
        or request.headers.get(LEGACY_SESSION_HEADER)
        or f"session_{uuid4()}"
    )


def cart_session(request: Request, response: Response) -> str:
    session_id = resolve_session_id(request)
    services = getattr(request.app.state, "services", None)
    secure = bool(services and services.settings.is_production)
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=secure,
    )
    response.headers["X-Cart-Session"] = session_id
    return session_id


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive query datetimes as UTC so they compare with stored timestamps."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
