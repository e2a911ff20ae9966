"""Reviewer Core FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .. import __version__, schemas
from ..config import get_settings
from ..errors import DEFAULT_MESSAGES, DomainError, ErrorCode
from .middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from .routers import pull_requests, stats, teams, users

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("reviewer-core")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure the schema on startup when configured to."""
    logger.info(f"Starting Reviewer Core API (env={settings.env})")
    if settings.auto_create_schema:
        from ..database import init_db
        init_db()
    yield
    logger.info("Reviewer Core API stopped")


# Create FastAPI app
app = FastAPI(
    title="Reviewer Core API",
    description="Pull request reviewer assignment service",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
app.add_middleware(RequestLoggingMiddleware)


def _error_response(code: ErrorCode, message: str, status_code: int) -> JSONResponse:
    body = schemas.ErrorBody(error=schemas.ErrorItem(code=code.value, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Domain errors keep their kind and message."""
    logger.info(f"{request.method} {request.url.path}: {exc.code.value} - {exc.message}")
    return _error_response(exc.code, exc.message, exc.http_status)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads or missing parameters."""
    errors = exc.errors()
    message = errors[0].get("msg", DEFAULT_MESSAGES[ErrorCode.BAD_REQUEST]) if errors else DEFAULT_MESSAGES[ErrorCode.BAD_REQUEST]
    return _error_response(ErrorCode.BAD_REQUEST, message, 400)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Unclassified persistence failures surface as INTERNAL without details."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(ErrorCode.INTERNAL, DEFAULT_MESSAGES[ErrorCode.INTERNAL], 500)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(ErrorCode.INTERNAL, DEFAULT_MESSAGES[ErrorCode.INTERNAL], 500)


app.include_router(teams.router, prefix="/team")
app.include_router(users.router, prefix="/users")
app.include_router(pull_requests.router, prefix="/pullRequest")
app.include_router(stats.router, prefix="/stats")


@app.get("/")
def root():
    """Root endpoint with server info."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health", response_model=schemas.HealthResponse)
def health_check():
    """Liveness probe."""
    return schemas.HealthResponse()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "reviewer_core.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
