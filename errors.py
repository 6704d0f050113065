# errors.py
import logging
import traceback
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for every failure reported to the caller as ``{success, message}``."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"success": False, "message": self.message}


class BadRequest(AppError):
    status_code = 400
    default_message = "Bad request"


class InvalidInput(BadRequest, ValueError):
    default_message = "Invalid input"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Invalid/Expired token"


class InvalidCredential(AppError):
    status_code = 401
    default_message = "Invalid password"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class DuplicateIdentity(AppError):
    status_code = 409
    default_message = "Username or email already exists"


class UpstreamFailure(AppError):
    status_code = 502
    default_message = "Could not reach the AI provider"


class ServerFault(AppError):
    status_code = 500
    default_message = "Server error"


def _describe_validation_error(exc: RequestValidationError) -> str:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        if loc:
            fields.append(".".join(loc))
    if fields:
        return f"Missing or invalid field(s): {', '.join(fields)}"
    return "Malformed request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = BadRequest(_describe_validation_error(exc))
        logger.info(f"{request.method} {request.url.path} rejected (400): {error.message}")
        return JSONResponse(status_code=error.status_code, content=error.to_content())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}\nTraceback: {traceback.format_exc()}")
        error = ServerFault()
        return JSONResponse(status_code=error.status_code, content=error.to_content())
