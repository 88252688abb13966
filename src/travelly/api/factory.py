"""FastAPI application factory."""

from fastapi import FastAPI, Request, Response

from travelly.api.deps import get_storage
from travelly.api.errors import register_error_handlers
from travelly.infra.storage import Storage
from travelly.observability.correlation import (
    CORRELATION_ID_HEADER,
    accept_correlation_id,
    correlation_scope,
)

from .routers import public


def create_app(storage: Storage | None = None) -> FastAPI:
    """Create the back-office API.

    Args:
        storage: Explicit storage to serve from. If None, the backend is
                 chosen from STORAGE_BACKEND / DATABASE_URL on first request.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Travelly",
        docs_url=None,
        redoc_url=None,
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = accept_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        with correlation_scope(cid):
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response

    register_error_handlers(app)
    app.include_router(public.router)

    if storage is not None:
        app.dependency_overrides[get_storage] = lambda: storage

    return app
