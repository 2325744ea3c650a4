import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_ORIGINS, HOST, PORT
from .database import Database, SchemaInitializer, build_database_url
from .logging_setup import setup_logging
from .routers import health, tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Serve immediately; the schema is brought up in the background.
    initializer: SchemaInitializer = app.state.initializer
    initializer.start()
    try:
        yield
    finally:
        await initializer.stop()
        app.state.database.dispose()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request"})


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the API around ``database`` (defaults to the configured store)."""
    if database is None:
        database = Database(build_database_url())

    app = FastAPI(
        title="Task Manager API",
        description="REST API for creating, listing, editing and deleting tasks",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.initializer = SchemaInitializer(database)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(tasks.router, prefix="/api", tags=["tasks"])
    return app


app = create_app()


def run() -> None:
    """Run the API server with uvicorn on HOST:PORT."""
    setup_logging()
    logger.info("Server running on port %d", PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)
