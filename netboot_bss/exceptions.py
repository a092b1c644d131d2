"""Custom exceptions and FastAPI exception handlers."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base application error."""

    def __init__(self, error: str, message: str, status_code: int = 400, details: dict | None = None):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__("NOT_FOUND", message, 404, details)


class AlreadyExistsError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__("ALREADY_EXISTS", message, 400, details)


class InvalidVersionError(AppError):
    def __init__(self, message: str = "invalid version number", details: dict | None = None):
        super().__init__("INVALID_VERSION", message, 400, details)


class ValidationError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__("VALIDATION_ERROR", message, 400, details)


class UnprocessableError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__("UNPROCESSABLE", message, 422, details)


class BackendError(AppError):
    """Storage failure (SQL error, serialisation failure)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("BACKEND_ERROR", message, 500, details)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""

    @app.exception_handler(AppError)
    async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
        body: dict = {"error": exc.error, "message": exc.message}
        if exc.details:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=body)
