"""FastAPI application entry point."""
import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import (
    admin,
    health,
    personal_bookmarks,
    public_bookmarks,
    tags,
    users,
    webpage_info,
)
from core.config import get_settings
from services.exceptions import (
    DuplicateLocationError,
    NotFoundError,
    PublicBookmarkExistsError,
    UserDataExistsError,
    UserIdMismatchError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and log the outcome."""
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response


app_settings = get_settings()

app = FastAPI(
    title="Bookmarks API",
    description="Store, tag, search and rate personal and public bookmarks.",
    version="1.0.0",
)


@app.exception_handler(NotFoundError)
async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    """Missing (or invisible) bookmarks and user data."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    """Business rule violations, with every failed check listed."""
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "validation_errors": exc.validation_errors},
    )


@app.exception_handler(PublicBookmarkExistsError)
@app.exception_handler(DuplicateLocationError)
@app.exception_handler(UserDataExistsError)
async def conflict_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Unique constraint conflicts."""
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(UserIdMismatchError)
async def user_id_mismatch_handler(_request: Request, exc: UserIdMismatchError) -> JSONResponse:
    """Path user id that does not belong to the caller."""
    return JSONResponse(status_code=401, content={"detail": str(exc)})


app.add_middleware(AccessLogMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Location"],
)

app.include_router(health.router)
app.include_router(public_bookmarks.router)
app.include_router(tags.router)
app.include_router(webpage_info.router)
app.include_router(personal_bookmarks.router)
app.include_router(users.router)
app.include_router(admin.router)
