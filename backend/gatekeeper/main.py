import logging
import os

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import router as api_router
from .config import Settings, get_settings
from .errors import (
    VALIDATION_ERROR,
    AppError,
    InternalError,
    error_payload,
    resolve_error_code,
    safe_message,
)
from .middleware import AccessGateMiddleware
from .routing.redirects import RedirectPolicy

log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()


def _resolve_log_level(value: str) -> int:
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


log_level = _resolve_log_level(log_level_name)

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
logger = logging.getLogger("gatekeeper")
logger.setLevel(log_level)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def _log_error(request: Request, status_code: int, code: str, message: str, exc: Exception | None = None) -> None:
    log_message = f"[{code}] path={request.url.path} request_id={_request_id(request) or 'n/a'} message={message}"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(log_message, exc_info=exc)
    else:
        logger.warning(log_message)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    _log_error(request, exc.status_code, exc.code, exc.message, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.code, exc.message, exc.details, _request_id(request)),
    )


async def handle_http_exception(
    request: Request, exc: HTTPException | StarletteHTTPException
) -> JSONResponse:
    message = safe_message(exc.status_code)
    detail = exc.detail
    detail_message = detail if isinstance(detail, str) else ""
    code = resolve_error_code(exc.status_code)
    _log_error(request, exc.status_code, code, detail_message.strip() or message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code, message, detail, _request_id(request)),
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = safe_message(status.HTTP_422_UNPROCESSABLE_ENTITY)
    _log_error(request, status.HTTP_422_UNPROCESSABLE_ENTITY, VALIDATION_ERROR, message, exc)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_payload(VALIDATION_ERROR, message, jsonable_errors(exc), _request_id(request)),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, object]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


async def handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    _log_error(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError.code,
        InternalError.message,
        exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(InternalError.code, InternalError.message, request_id=_request_id(request)),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    if settings.debug:
        logger.warning("DEBUG=true, do not use in production")

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    # Endpoints read the same configuration the edge gate was built with
    app.state.settings = settings
    app.state.redirect_policy = RedirectPolicy.from_settings(settings)

    app.add_middleware(AccessGateMiddleware, settings=settings)
    app.include_router(api_router)

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unhandled_exception)
    return app
