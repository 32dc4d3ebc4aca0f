"""Custom exceptions, upstream error classification and FastAPI error handlers."""

import enum
import logging
from dataclasses import dataclass

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class LiveStreamsError(Exception):
    """Base exception with HTTP status code and a short error title."""

    def __init__(self, message: str, status_code: int = 500, error: str = "Internal Server Error"):
        super().__init__(message)
        self.status_code = status_code
        self.error = error


class ConfigurationError(LiveStreamsError):
    def __init__(self, message: str = "Please set YOUTUBE_API_KEY in your .env file"):
        super().__init__(message, status_code=500, error="YouTube API key not configured")


class PerTermFetchError(LiveStreamsError):
    """A single query term failed; recorded and skipped by the aggregator."""

    def __init__(self, term: str, cause: Exception):
        super().__init__(f"Error fetching streams for hashtag {term}: {cause}")
        self.term = term
        self.cause = cause


class UpstreamQuotaOrAuthError(LiveStreamsError):
    def __init__(self, message: str):
        super().__init__(message, status_code=403, error="API quota exceeded or invalid API key")


class UpstreamBadRequestError(LiveStreamsError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, error="Invalid request")


class UpstreamUnknownError(LiveStreamsError):
    def __init__(self, message: str):
        super().__init__(message, status_code=500, error="Unknown error")


class UpstreamErrorKind(enum.Enum):
    QUOTA_OR_AUTH = "quota_or_auth"
    BAD_REQUEST = "bad_request"
    UNKNOWN = "unknown"


_EXCEPTIONS = {
    UpstreamErrorKind.QUOTA_OR_AUTH: UpstreamQuotaOrAuthError,
    UpstreamErrorKind.BAD_REQUEST: UpstreamBadRequestError,
    UpstreamErrorKind.UNKNOWN: UpstreamUnknownError,
}

QUOTA_OR_AUTH_STATUSES = {401, 403, 429}


@dataclass(frozen=True)
class UpstreamError:
    kind: UpstreamErrorKind
    message: str
    status_hint: int

    def to_exception(self) -> LiveStreamsError:
        return _EXCEPTIONS[self.kind](self.message)


def _upstream_detail(response: httpx.Response) -> str | None:
    """Pull ``error.message`` out of a YouTube error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


def classify_upstream_error(exc: Exception) -> UpstreamError:
    """Map an upstream failure onto the quota/bad-request/unknown taxonomy."""
    if isinstance(exc, PerTermFetchError):
        exc = exc.cause

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status in QUOTA_OR_AUTH_STATUSES:
            return UpstreamError(
                UpstreamErrorKind.QUOTA_OR_AUTH,
                "Please check your YouTube API key and quota limits",
                403,
            )
        if status == 400:
            return UpstreamError(
                UpstreamErrorKind.BAD_REQUEST,
                _upstream_detail(exc.response) or "Bad request to YouTube API",
                400,
            )

    return UpstreamError(
        UpstreamErrorKind.UNKNOWN,
        str(exc) or "An unexpected error occurred",
        500,
    )


def _error_body(error: str, message: str) -> dict:
    return {"success": False, "error": error, "message": message}


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(LiveStreamsError)
    async def handle_live_streams_error(_request: Request, exc: LiveStreamsError):
        return JSONResponse(_error_body(exc.error, str(exc)), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Route {request.method} {request.url.path} not found"
            return JSONResponse(_error_body("Not Found", message), status_code=404)
        return JSONResponse(_error_body(str(exc.detail), str(exc.detail)), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            _error_body("Internal Server Error", "An unexpected error occurred"),
            status_code=500,
        )
