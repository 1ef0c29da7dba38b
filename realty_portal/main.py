"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging
import os

from realty_portal.config import settings
from realty_portal.database import test_database_connection, close_db_connection
from realty_portal.routers import auth_router, properties_router, admin_router, agent_router
from realty_portal.utils.exceptions import APIException
from realty_portal.services.error_handler import ErrorHandlerService
from realty_portal.middleware.request_logging import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


def configure_audit_log_file(path: Optional[str]) -> None:
    """Mirror the audit logger to a file, one line per recorded action."""
    if not path:
        return

    audit_logger = logging.getLogger("realty_portal.audit")
    target = os.path.abspath(path)
    if any(getattr(h, "baseFilename", None) == target for h in audit_logger.handlers):
        return

    directory = os.path.dirname(target)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    audit_logger.addHandler(handler)


configure_audit_log_file(settings.audit_log_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await test_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Real-estate listing API with a public catalogue, an admin back office and
    an agent portal.

    ## Agent permissions

    Agents do not edit listings by default. They raise access requests for
    `add`, `edit` or `delete`, either on one listing or on all listings, and an
    administrator approves or rejects them. Every mutation is recorded in the
    audit trail.

    ## Authentication

    Use `/api/v1/auth/login` to obtain a JWT token, then send it in the
    Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Authentication",
            "description": "Login and current identity"
        },
        {
            "name": "Properties",
            "description": "Public catalogue search and listing detail"
        },
        {
            "name": "Admin",
            "description": "Listing management, agent directory, request review and audit trail"
        },
        {
            "name": "Agent",
            "description": "Assigned listings, access requests and permission-gated listing changes"
        },
        {
            "name": "Health",
            "description": "Liveness and database connectivity"
        }
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time"],
)

app.add_middleware(
    RequestLoggingMiddleware,
    enable_request_logging=not settings.is_testing,
    slow_request_threshold=2.0,
)

# Include API routers
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(properties_router, prefix=settings.api_v1_prefix)
app.include_router(admin_router, prefix=settings.api_v1_prefix)
app.include_router(agent_router, prefix=settings.api_v1_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors that escaped the service layer."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle framework HTTP exceptions with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint with database connectivity test.
    Used by load balancers and uptime monitors.
    """
    db_healthy = await test_database_connection()

    if not db_healthy:
        logger.error("Health check failed: database unreachable")
        return ErrorHandlerService.handle_http_exception(
            StarletteHTTPException(status_code=503, detail="Database connection failed")
        )

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }
