"""
Todo RBAC Server - Main FastAPI Application

This module contains the main FastAPI application. It configures logging,
builds the database and credential managers from settings at startup, and
renders every rejection as a structured JSON error.
"""

import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

import auth
import database
from config import GetSettings, Settings
from errors import ApiError, ErrorKind, StatusCodeFor
from managers.credential_manager import CredentialManager
from managers.database_manager import DatabaseManager

logger = logging.getLogger(__name__)


# ==================== Logging ====================

def ConfigureLogging(settings: Settings):
    """
    Configure logging to write to both console and a rotating file

    Args:
        settings: Application settings (LOG_LEVEL, LOG_DIR)
    """
    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_filename = logs_dir / f"todo-rbac-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            # Max 10MB per file, keep 10 backup files
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )


# ==================== Lifespan Events ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler for startup and shutdown
    Builds the credential and database managers; refuses to start without
    a signing key in production.
    """
    settings = GetSettings()
    ConfigureLogging(settings)

    logger.info(f"{settings.PROJECT_NAME} starting up ({settings.ENVIRONMENT.value})...")

    auth.credential_manager = CredentialManager(
        secret_key=settings.ResolveJwtSecret(),
        algorithm=settings.JWT_ALGORITHM,
        expiration_hours=settings.JWT_EXPIRATION_HOURS,
        bcrypt_rounds=settings.BCRYPT_ROUNDS
    )

    database.db_manager = DatabaseManager(settings.DATABASE_URL, registry=auth.role_registry)

    admin_password = database.db_manager.InitializeDatabase(auth.credential_manager, settings.ADMIN_EMAIL)
    if admin_password:
        logger.warning("=" * 60)
        logger.warning("NEW ADMIN USER CREATED")
        logger.warning(f"Email: {settings.ADMIN_EMAIL}")
        logger.warning(f"Password: {admin_password}")
        logger.warning("SAVE THIS PASSWORD - IT WILL NOT BE SHOWN AGAIN!")
        logger.warning("=" * 60)

    logger.info("Database initialized successfully")
    logger.info("Server startup complete")

    yield

    logger.info(f"{settings.PROJECT_NAME} shutting down...")
    database.db_manager.Dispose()
    logger.info("Shutdown complete")


# ==================== FastAPI Application ====================

app = FastAPI(
    title="Todo RBAC Server",
    description="Multi-user todo server with role-based access control",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=GetSettings().CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Exception Handlers ====================

def ErrorResponse(kind: ErrorKind, message: str) -> JSONResponse:
    """Render an error kind as a JSON response with its mapped status code"""
    headers = {"WWW-Authenticate": "Bearer"} if StatusCodeFor(kind) == 401 else None
    return JSONResponse(
        status_code=StatusCodeFor(kind),
        content={"error": message, "kind": kind.value},
        headers=headers
    )


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return ErrorResponse(exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg", message)
    return ErrorResponse(ErrorKind.VALIDATION_ERROR, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return ErrorResponse(ErrorKind.INTERNAL_ERROR, "Internal server error")


# ==================== Include Routers ====================

from routes import status, auth as auth_routes, todos, users, roles

app.include_router(status.router)
app.include_router(auth_routes.router)
app.include_router(todos.router)
app.include_router(users.router)
app.include_router(roles.router)


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    settings = GetSettings()

    uvicorn.run(
        "server:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower()
    )
