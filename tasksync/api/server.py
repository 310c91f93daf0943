"""FastAPI application for the TaskSync API server."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasksync import __version__
from tasksync.c1_database_session import DatabaseManager
from tasksync.c1_errors import ErrorKind, TaskSyncError
from tasksync.c2_identity_service import IdentityService, TokenIssuer
from tasksync.c2_realtime_hub import RealtimeHub
from tasksync.c2_task_repository import TaskRepository
from tasksync.c2_task_service import TaskService
from tasksync.core.config import Settings, get_settings
from tasksync.core.logging_setup import setup_logging

# C3 Routes (Application Layer)
from tasksync.c3_auth_routes import create_auth_router
from tasksync.c3_health_routes import router as health_router
from tasksync.c3_task_routes import create_task_router
from tasksync.c3_user_routes import create_user_router
from tasksync.c3_websocket_routes import create_websocket_router

logger = logging.getLogger(__name__)


class ServerState:
    """Owns every long-lived component of one server process."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.db_manager: Optional[DatabaseManager] = None
        self.identity_service: Optional[IdentityService] = None
        self.task_repository: Optional[TaskRepository] = None
        self.hub: Optional[RealtimeHub] = None
        self.task_service: Optional[TaskService] = None

    async def initialize(self):
        """Initialize server components."""
        config = self.settings

        # Initialize database
        database_path = str(config.database.database_path)
        if database_path != ":memory:":
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_manager = DatabaseManager(database_path)
        self.db_manager.create_tables()

        # Initialize identity resolver
        token_issuer = TokenIssuer(
            secret=config.auth.jwt_secret.get_secret_value(),
            algorithm=config.auth.jwt_algorithm,
            expire_minutes=config.auth.access_token_expire_minutes,
        )
        self.identity_service = IdentityService(
            db_manager=self.db_manager,
            token_issuer=token_issuer,
            bcrypt_rounds=config.auth.bcrypt_rounds,
        )

        # Initialize realtime hub, then the service that publishes through it
        self.hub = RealtimeHub(resolve_identity=self.identity_service.resolve_token)
        await self.hub.init()

        self.task_repository = TaskRepository(self.db_manager)
        self.task_service = TaskService(self.task_repository, self.hub)

        logger.info("Server state initialized successfully")

    async def shutdown(self):
        """Cleanup on shutdown."""
        if self.hub is not None:
            await self.hub.shutdown()
        if self.db_manager is not None:
            self.db_manager.dispose()
        logger.info("Server state shut down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to the process settings

    Returns:
        FastAPI: application whose components start with its lifespan
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    server_state = ServerState(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting TaskSync API server...")
        await server_state.initialize()
        try:
            yield
        finally:
            logger.info("Shutting down TaskSync API server...")
            await server_state.shutdown()

    app = FastAPI(
        title="TaskSync API",
        description="Multi-user task tracking with realtime task synchronization",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.server_state = server_state

    if settings.server.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.server.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(TaskSyncError)
    async def task_sync_error_handler(request: Request, exc: TaskSyncError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid')}" if location else first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={"detail": message, "error": ErrorKind.INVALID_INPUT.value},
        )

    app.include_router(health_router)
    app.include_router(create_auth_router(server_state))
    app.include_router(create_user_router(server_state))
    app.include_router(create_task_router(server_state))
    app.include_router(create_websocket_router(server_state))

    return app
