"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.config import Settings
from portal.interface.api.errors import register_error_handlers
from portal.interface.api.middleware import REQUEST_ID_HEADER, RequestIDMiddleware
from portal.interface.api.routes import auth, health, metadata, migration
from portal.util.di.container import create_container, setup_di
from portal.util.observability import instrument_fastapi


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.

    Args:
        container: DI container to use; the production container by default.
            Tests pass a container built from mock providers.
    """
    settings = Settings()

    app_instance = FastAPI(
        title="Enablement Portal API",
        description="Metadata taxonomy administration for the enablement portal",
        version="0.1.0",
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    # Middleware added last runs first: request IDs exist before CORS answers
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "X-Requested-With",
            REQUEST_ID_HEADER,
            "x-dev-role",
            "x-dev-user-id",
        ],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=600,  # Cache preflight requests for 10 minutes
    )
    app_instance.add_middleware(RequestIDMiddleware)

    register_error_handlers(app_instance)

    # Setup dependency injection
    # Settings are loaded from environment automatically
    setup_di(app_instance, container or create_container())

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    # Before metadata so /migration is never read as a group key
    app_instance.include_router(migration.router)
    app_instance.include_router(metadata.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: start_app.py handles this
app = create_app()
