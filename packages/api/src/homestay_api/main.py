# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .routes import admin, applications, health, payments, review
from .schemas.error import ErrorResponse
from .services.errors import (
    ActionNotPermittedError,
    ApplicationNotFoundError,
    ApplicationValidationError,
    IncompleteDocumentsError,
    NumberAllocationError,
    StateConflictError,
)
from .services.notifications import init_notifier, log_notification_status

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    log_notification_status()
    if settings.AUTH_DISABLED:
        logger.warning("Authentication DISABLED (AUTH_DISABLED=true); all requests run as the dev user")
    else:
        logger.info("Authentication ENABLED (realm=%s)", settings.KEYCLOAK_REALM)
    notifier = init_notifier()
    yield
    await notifier.drain()


app = FastAPI(
    title="Himachal Pradesh Homestay Registration API",
    description="Homestay registration, review and certification workflow",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _build_error(status_code: int, detail: str, request_id: str, **extensions) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        **extensions,
    )


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _problem(request: Request, status_code: int, detail: str, **extensions) -> JSONResponse:
    body = _build_error(status_code, detail, _request_id(request), **extensions)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    return _problem(request, 422, str(exc.errors()))


@app.exception_handler(ApplicationValidationError)
async def application_validation_handler(request: Request, exc: ApplicationValidationError):
    return _problem(request, 400, str(exc))


@app.exception_handler(StateConflictError)
async def state_conflict_handler(request: Request, exc: StateConflictError):
    return _problem(request, 409, str(exc), current_status=exc.current_status)


@app.exception_handler(ActionNotPermittedError)
async def action_not_permitted_handler(request: Request, exc: ActionNotPermittedError):
    return _problem(request, 403, str(exc))


@app.exception_handler(IncompleteDocumentsError)
async def incomplete_documents_handler(request: Request, exc: IncompleteDocumentsError):
    return _problem(request, 422, str(exc), pending_documents=exc.pending_files)


@app.exception_handler(ApplicationNotFoundError)
async def not_found_handler(request: Request, exc: ApplicationNotFoundError):
    return _problem(request, 404, str(exc))


@app.exception_handler(NumberAllocationError)
async def number_allocation_handler(request: Request, exc: NumberAllocationError):
    logger.error("Number allocation failed (request_id=%s): %s", _request_id(request), exc)
    return _problem(request, 500, "Could not allocate a unique number. Please retry shortly.")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(review.router, prefix="/api/review/applications", tags=["review"])
app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the Himachal Pradesh Homestay Registration API"}
