"""ASGI entry point: ``uvicorn automation.main:app``.

create_app() reads settings when called, so tests can set the environment
first and build their own app.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from automation.api.v1 import api_router
from automation.core.config import Settings, get_settings
from automation.core.exception_handlers import register_exception_handlers
from automation.core.lifespan import create_lifespan
from automation.core.limiter import limiter
from automation.infrastructure.memory import InMemoryBackend


def _cors_origins(settings: Settings) -> list[str]:
    return [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Workflow rules for CRM records: conditions, actions, execution history.",
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    # Rules and records live in this process unless Postgres is configured.
    app.state.memory_backend = (
        InMemoryBackend() if settings.database_backend == "memory" else None
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", settings.organization_header_name],
    )
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
