"""FastAPI application entry point: the Airtable content proxy."""

import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from portal.config import settings
from portal.errors import PortalError
from portal.routes import content, programs, resources

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = "GET,POST,OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"
CORS_MAX_AGE = "600"

_cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]


def _allowed_origin(request: Request) -> str | None:
    if "*" in _cors_origins:
        return "*"
    origin = request.headers.get("origin")
    return origin if origin in _cors_origins else None


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


class ProxyHeadersMiddleware(BaseHTTPMiddleware):
    """Answer CORS preflight for any path and stamp proxy headers on responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        allow_origin = _allowed_origin(request)

        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_204_NO_CONTENT)
            response.headers["Access-Control-Max-Age"] = CORS_MAX_AGE
        else:
            response = await call_next(request)
            response.headers["Cache-Control"] = "no-store"

        if allow_origin:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=()"
        )
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert anything the exception handlers didn't catch into INTERNAL_ERROR."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=True)
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                str(exc) or "Server error",
                "INTERNAL_ERROR",
            )


app = FastAPI(
    title="ClinicalRxQ Portal",
    description="Member portal API - Airtable proxy for programs, resources and announcements",
    version="0.1.0",
)

# Last added runs outermost, so converted errors still get proxy headers
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(ProxyHeadersMiddleware)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "Not Found", "NOT_FOUND")
    return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "Bad Request", "BAD_REQUEST")


# Include API routers
app.include_router(programs.router, prefix="/api")
app.include_router(resources.router, prefix="/api")
app.include_router(content.router, prefix="/api")


@app.get("/api/health")
async def health_check() -> JSONResponse:
    """Report whether Airtable credentials are configured."""
    ok = settings.airtable_configured
    return JSONResponse(
        status_code=status.HTTP_200_OK if ok else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": ok, "airtableConfigured": ok},
    )


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "ClinicalRxQ Portal API",
        "version": "0.1.0",
        "docs": "/docs",
    }
