"""Domain errors and their mapping onto the response envelope."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("mt-tasks.errors")

class AppError(Exception):
    """Base class for failures that are reported to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(AppError):
    status_code = 400

class AuthenticationError(AppError):
    status_code = 401

class AuthorizationError(AppError):
    status_code = 403

class NotFoundError(AppError):
    status_code = 404

class ConflictError(AppError):
    # duplicates are reported as 400 to match existing clients
    status_code = 400

class InternalError(AppError):
    status_code = 500

class InvalidAssertion(AuthenticationError):
    pass

class MalformedAssertion(ValidationError):
    pass

class ExpiredCredential(AuthenticationError):
    pass

class InvalidCredential(AuthenticationError):
    pass

class InvalidMemberSubset(ValidationError):
    pass

class MembershipScopeError(ValidationError):
    pass

def envelope_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})

def _actor(request: Request) -> str:
    return str(getattr(request.state, "user_id", None) or "anonymous")

def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"

def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        logger.warning(
            f"{request.method} {request.url.path} failed for user {_actor(request)}: "
            f"{exc.__class__.__name__}: {exc.message}"
        )
        return envelope_error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _describe_validation(exc)
        logger.warning(f"{request.method} {request.url.path} rejected for user {_actor(request)}: {message}")
        return envelope_error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} for user {_actor(request)}")
        return envelope_error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"{request.method} {request.url.path} crashed for user {_actor(request)}",
            exc_info=exc,
        )
        return envelope_error(500, "Internal server error")
