from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import Database, SQLiteTaskRepository
from .logging_setup import configure_logging
from .routers import tasks as tasks_router
from .settings import Settings, get_settings
from .usecases import TaskService, TaskUseCase

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "CRUD operations for tasks with offset/limit pagination.",
    },
]


def register_error_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """Register application-wide exception handlers."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Unparsable request bodies are client errors: 400 with a message body."""
        logger.warning("Bad request on %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"message": "Malformed request body"})

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error on %s %s: %s", request.method, request.url.path, type(exc).__name__)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    use_case: Optional[TaskUseCase] = None,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Unless a use case is injected, wires Database -> SQLiteTaskRepository ->
    TaskService from settings. The schema is created on startup.
    """
    settings = settings or get_settings()
    logger = logger or logging.getLogger("src.api")

    database: Optional[Database] = None
    if use_case is None:
        database = Database(
            settings.sqlite_db_path,
            timeout=settings.sqlite_timeout,
            query_timeout=settings.query_timeout or None,
        )
        repository = SQLiteTaskRepository(database, logger.getChild("repository"))
        use_case = TaskService(repository, logger.getChild("usecase"))

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if database is not None:
            database.init_schema()
        yield

    app = FastAPI(
        title="Task Backend",
        description="Backend API service for managing tasks backed by a relational store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.logger = logger
    app.state.database = database
    app.state.task_use_case = use_case

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, logger)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy"}

    app.include_router(tasks_router.router)
    return app


_settings = get_settings()
app = create_app(_settings, logger=configure_logging(_settings.log_level))
