"""FastAPI application main module.

This module builds the FastAPI application for the Products4U service:
logging, CORS, error rendering and the query/recommendation routers. The
MongoDB gateway is connected in the lifespan handler, so uvicorn does not
bind its listener until the database has answered a ping; if it does not
answer, startup fails and the process exits non-zero.

Run with::

    uvicorn products4u.api.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from products4u import __version__
from products4u.api.config import Settings, get_settings
from products4u.api.exceptions import Products4UException
from products4u.api.logging_config import RequestLoggingMiddleware, setup_logging
from products4u.api.routes import queries, recommendations
from products4u.storage.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path"}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Malformed JSON body"

    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in _LOCATION_PREFIXES
    )
    if not field:
        if first.get("type") == "missing":
            return "Request body is required"
        return "Invalid request body"
    if first.get("type") in {"missing", "string_too_short"}:
        return f"Missing required field: {field}"
    return f"Invalid value for {field}: {first.get('msg')}"


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": <message>}``."""

    @app.exception_handler(Products4UException)
    async def handle_products4u_exception(
        request: Request, exc: Products4UException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                exc.message,
                extra={"path": str(request.url.path), **exc.details},
            )
        else:
            logger.warning(
                exc.message,
                extra={"path": str(request.url.path), **exc.details},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _validation_message(exc)
        logger.warning(message, extra={"path": str(request.url.path)})
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error: {exc}",
            extra={"path": str(request.url.path), "error_type": type(exc).__name__},
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[PersistenceGateway] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Loaded from the environment when
            omitted.
        gateway: Persistence gateway to serve requests with. Built from
            ``settings`` when omitted.

    Returns:
        A configured FastAPI instance. The gateway is connected when the
        application starts, not here.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings.log_level)

    if gateway is None:
        gateway = PersistenceGateway.from_uri(
            settings.mongodb_uri,
            database_name=settings.database_name,
            queries_collection=settings.queries_collection,
            recommendations_collection=settings.recommendations_collection,
            timeout_ms=settings.mongodb_timeout_ms,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Raises StorageUnavailableError, which aborts startup
        await gateway.connect()
        app.state.gateway = gateway
        logger.info(
            "Products4U API ready",
            extra={"host": settings.host, "port": settings.port},
        )
        try:
            yield
        finally:
            await gateway.close()

    app = FastAPI(
        title=settings.app_name,
        description="Product boycott queries and alternative recommendations",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)

    app.include_router(queries.router)
    app.include_router(recommendations.router)

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Returns:
            Dictionary with status key set to "ok".
        """
        return {"status": "ok"}

    return app


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "products4u.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
