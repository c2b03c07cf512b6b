"""
FastAPI application for the address book service
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from addressbook.api.routes import contacts, health, metrics, users
from addressbook.core.config import get_settings
from addressbook.core.database import get_session_local, init_db
from addressbook.core.errors import AddressBookError
from addressbook.core.logging_config import LoggingConfig
from addressbook.core.middleware import LoggingContextMiddleware
from addressbook.core.middleware_metrics import MetricsMiddleware
from addressbook.services.auth_service import AuthService

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")

    if settings.db_create_tables_on_startup:
        init_db()
        db = get_session_local()()
        try:
            AuthService(db).cleanup_expired_sessions()
        finally:
            db.close()

    yield

    logger.info(f"Shutting down {settings.app_name}...")


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Request validation failed"
    error = errors[0]
    if error.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    message = error.get("msg", "is invalid")
    if error.get("type") == "value_error":
        message = message.removeprefix("Value error, ")
    field = next((str(part) for part in reversed(error.get("loc", ())) if isinstance(part, str)), None)
    if field and field != "body":
        return f'"{field}" {message}'
    return message


def register_exception_handlers(app: FastAPI):
    """Map the error taxonomy onto {"message": ...} responses"""

    @app.exception_handler(AddressBookError)
    async def address_book_error_handler(request: Request, exc: AddressBookError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": _first_validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log unhandled errors; never leak their details to the caller"""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            }
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app() -> FastAPI:
    """Build the application with middleware, handlers and routers"""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Per-user address book: contacts with pagination, favorites and ownership scoping",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count", "X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(contacts.router)
    if settings.enable_metrics:
        app.include_router(metrics.router)

    @app.get("/api")
    async def root():
        """Root API endpoint"""
        return {
            "name": settings.app_name,
            "version": API_VERSION,
            "status": "running",
            "environment": settings.app_env,
        }

    return app


app = create_app()
