"""
FastAPI application for the Book API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from book_api.config import APIConfig, config
from book_api.database import BookRepository, MongoDBManager
from book_api.error_log import ErrorLogSink
from book_api.errors import BookAPIError
from book_api.middleware import (
    api_error_handler, http_exception_handler, log_requests,
    request_validation_handler, unhandled_exception_handler
)
from book_api.models import HealthResponse
from book_api.routes import router
from book_api.service import BookService

# Setup logging
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: APIConfig = app.state.settings
    logger.info("Starting Book API")

    manager = None
    if app.state.book_service is None:
        manager = MongoDBManager(
            connection_url=settings.mongodb_url,
            database_name=settings.mongodb_database,
            collection_name=settings.mongodb_collection
        )
        repository = await manager.connect()
        app.state.book_service = BookService(repository, settings.compound_compensate)

    yield

    logger.info("Shutting down Book API")
    if manager:
        await manager.disconnect()
    app.state.error_log.close()


def create_app(
    settings: Optional[APIConfig] = None,
    repository: Optional[BookRepository] = None,
    error_log: Optional[ErrorLogSink] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration, defaults to the global config
        repository: Book store; when omitted one is connected to MongoDB at startup
        error_log: Error log sink, defaults to ``settings.error_log_file``
    """
    settings = settings or config

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
        # Trailing-slash paths are routed explicitly in book_api.routes
        redirect_slashes=False
    )

    app.state.settings = settings
    app.state.error_log = error_log or ErrorLogSink(settings.error_log_file)
    app.state.book_service = (
        BookService(repository, settings.compound_compensate) if repository is not None else None
    )

    app.middleware("http")(log_requests)

    app.add_exception_handler(BookAPIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        db_status = "unhealthy"
        service = app.state.book_service
        if service is not None:
            health_info = await service.repository.health_check()
            db_status = health_info.get("status", "unknown")

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=settings.api_version,
            database_status=db_status
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "book_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
