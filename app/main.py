"""
Ton.Place mini app: FastAPI application and error handling.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.api import api_router
from app.core.config import settings
from app.core.exceptions import TonPlaceAppException, InvalidRequestError
from app.core.http_client import close_http_client
from app.core.logging_config import setup_logging, log_info, log_warning, log_error
from app.middleware.request_logging import request_id_ctx, RequestLoggingMiddleware
from app.tonplace.exceptions import TonPlaceError

setup_logging()

# Status codes for application exceptions; anything unlisted is a 500
APP_EXCEPTION_STATUS = {
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
}


def _is_production() -> bool:
    return settings.environment == "production"


def _error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    """JSON error body read by the page script: ``error``, ``message``, ``request_id``."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **extra, "request_id": request_id_ctx.get()},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_info(
        f"Starting {settings.app_name}",
        app_id=settings.app_id,
        environment=settings.environment,
        credentials_configured=settings.credentials_configured,
    )
    yield
    log_info(f"Shutting down {settings.app_name}")
    try:
        await close_http_client()
    except Exception as exc:
        log_warning(f"Failed to close HTTP client: {exc}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Ton.Place mini app backend: launch signature verification and purchases",
    docs_url=None if _is_production() else "/docs",
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = str(time.time() - start_time)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid request bodies; ``message`` is the first failure, shown to the user as-is."""
    details = [
        {"loc": err.get("loc"), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    log_warning(
        "Request validation failed",
        request_id=request_id_ctx.get(),
        path=request.url.path,
        method=request.method,
        errors=details,
    )
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        details[0]["msg"] if details else "Invalid request",
        details=details,
    )


@app.exception_handler(TonPlaceAppException)
async def app_exception_handler(request: Request, exc: TonPlaceAppException):
    log_warning(str(exc), request_id=request_id_ctx.get(), path=request.url.path)
    status_code = next(
        (code for exc_type, code in APP_EXCEPTION_STATUS.items() if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return _error_response(status_code, type(exc).__name__, str(exc))


@app.exception_handler(TonPlaceError)
async def tonplace_exception_handler(request: Request, exc: TonPlaceError):
    """Ton.Place API failures are reported as 502 Bad Gateway."""
    log_error(exc, request_id=request_id_ctx.get(), path=request.url.path)
    message = "Ton.Place API request failed. Please try again later." if _is_production() else str(exc)
    return _error_response(status.HTTP_502_BAD_GATEWAY, type(exc).__name__, message)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    log_error(exc, request_id=request_id_ctx.get(), path=request.url.path)
    message = "An unexpected error occurred. Please try again later." if _is_production() else str(exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_server_error", message)


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
