"""FastAPI application factory.

Every request runs inside the storefront domain context with the request
details bound to the structlog context. Application services are built
once per app and handed to routes through ``app.state``.
"""

from datetime import UTC, datetime
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.admin import admin_router
from storefront.api.errors import register_exception_handlers
from storefront.api.shop import shop_router
from storefront.config import Settings
from storefront.domain import storefront
from storefront.services import Services, build_services
from storefront.utils.logging import add_context, clear_context


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or (services.settings if services else Settings.from_env())

    app = FastAPI(
        title="Storefront API",
        description="Shop catalogue, session carts, checkout and payments",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and bind request details to the log context."""
        add_context(
            request_id=request.headers.get("x-request-id") or uuid4().hex,
            path=request.url.path,
            method=request.method,
        )
        try:
            with storefront.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        return response

    app.state.services = services or build_services(settings)

    register_exception_handlers(app)
    app.include_router(shop_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "timestamp": datetime.now(UTC).isoformat()})

    return app
