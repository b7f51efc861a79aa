"""
Application errors and their HTTP translation.

Services raise these errors at the point of detection; whichever API layer
hosts the services installs ``register_exception_handlers`` so every error
leaves as the same JSON shape.
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error with consistent structure"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def __str__(self) -> str:
        return str(self.detail)


class NotFoundError(APIError):
    """Referenced entity does not exist"""

    def __init__(
        self, detail: str = "Registro no encontrado", error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code
        )


class ConflictError(APIError):
    """Uniqueness or state conflict"""

    def __init__(self, detail: str = "Conflicto con un registro existente", error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT, detail=detail, error_code=error_code
        )


class ValidationError(APIError):
    """Payload rejected by business validation"""

    def __init__(
        self, detail: str = "Datos inválidos", error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


async def handle_key_error(request: Request, exc: KeyError) -> JSONResponse:
    """Convert KeyError to consistent API response"""
    logger.warning("KeyError at %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "detail": f"Registro no encontrado: {exc}",
            "error_code": "NOT_FOUND",
            "path": str(request.url.path),
        },
    )


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    """Convert ValueError to consistent API response"""
    logger.warning("ValueError at %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": str(exc),
            "error_code": "VALIDATION_ERROR",
            "path": str(request.url.path),
        },
    )


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    if exc.status_code >= 500:
        logger.error("%s at %s: %s", exc.error_code, request.url.path, exc.detail)
    else:
        logger.info("%s at %s: %s", exc.error_code, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code,
            "path": str(request.url.path),
        },
        headers=exc.headers,
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(KeyError, handle_key_error)
    app.add_exception_handler(ValueError, handle_value_error)
    app.add_exception_handler(APIError, handle_api_error)
