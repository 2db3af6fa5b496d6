import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .envelope import error_envelope, success_envelope
from .errors import AppError
from .logging_config import setup_logging
from .routers import assignments as assignments_router
from .routers import notes as notes_router
from .routers import system as system_router
from .settings import get_settings

setup_logging()
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "system", "description": "Health, API info, dashboard statistics and backups."},
    {
        "name": "assignments",
        "description": "Assignments with due dates, priority and derived overdue status; filtering, sorting, pagination.",
    },
    {"name": "notes", "description": "Free-text notes, optionally linked to an assignment."},
]

app = FastAPI(
    title="Academic Organizer API",
    description="Backend API for managing assignments and notes, persisted as JSON files.",
    version="1.0.0",
    openapi_tags=openapi_tags,
)

_settings = get_settings()

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log one line per request with status and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(
        level,
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Map application errors to their status code.

    Response format:
        {"success": false, "error": "<message>", "details": [...]}
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, details=exc.details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and disallowed methods answer with the error envelope too."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent envelope for request validation errors.

    Response format:
        {
            "success": false,
            "error": "Validation failed",
            "message": "Request validation failed",
            "details": [{"field": ..., "message": ...}, ...]
        }
    """
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_envelope("Validation failed", "Request validation failed", details),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Never expose internals: log the traceback, answer with a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_envelope("Internal server error"))


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["system"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return success_envelope(None, "Healthy")


# Include routers
app.include_router(system_router.router)
app.include_router(assignments_router.router)
app.include_router(notes_router.router)
