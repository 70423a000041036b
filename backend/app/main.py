import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import (
    activity,
    attendance,
    batches,
    faculty,
    free_slots,
    health,
    skills,
    students,
    substitution,
    suggestions,
)
from app.core.config import get_settings
from app.core.exceptions import AppError, UnexpectedError
from app.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware, SlowRequestLogMiddleware
from app.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "query", "path"})
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _first_validation_message(exc)})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    fallback = UnexpectedError()
    return JSONResponse(status_code=fallback.status_code, content={"error": fallback.message})


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.add_middleware(SlowRequestLogMiddleware, threshold_ms=settings.slow_request_ms)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(skills.router, prefix=f"{settings.api_prefix}/skills", tags=["skills"])
app.include_router(faculty.router, prefix=f"{settings.api_prefix}/faculty", tags=["faculty"])
app.include_router(batches.router, prefix=f"{settings.api_prefix}/batches", tags=["batches"])
app.include_router(students.router, prefix=f"{settings.api_prefix}/students", tags=["students"])
app.include_router(substitution.router, prefix=f"{settings.api_prefix}/substitution", tags=["substitution"])
app.include_router(free_slots.router, prefix=f"{settings.api_prefix}/free-slots", tags=["free-slots"])
app.include_router(suggestions.router, prefix=f"{settings.api_prefix}/suggestions", tags=["suggestions"])
app.include_router(attendance.router, prefix=f"{settings.api_prefix}/attendance", tags=["attendance"])
app.include_router(activity.router, prefix=settings.api_prefix, tags=["activity"])
