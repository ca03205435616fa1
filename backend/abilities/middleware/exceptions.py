"""Ability errors and the handlers that turn them into JSON responses.

Error body format (shared by every handler):
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable error message",
            "details": {...}  // Optional additional details
        }
    }
"""

import logging
from collections.abc import Sequence
from typing import Union

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AbilitiesException(Exception):
    """Base exception for ability check failures."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_403_FORBIDDEN,
        error_code: str = "ABILITIES_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class NoUserError(AbilitiesException):
    """No user was supplied and none could be resolved from the request."""

    def __init__(self, message: str = "No logged in user, and none supplied as argument"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="NO_USER",
        )


class DeniedError(AbilitiesException):
    """The user lacks at least one of the required abilities."""

    def __init__(self, actions: Sequence[str], missing: Sequence[str]):
        self.actions = tuple(actions)
        self.missing = tuple(missing)
        super().__init__(
            message=f"Missing abilities: {', '.join(self.missing)}",
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="MISSING_ABILITIES",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


async def abilities_exception_handler(
    request: Request,
    exc: AbilitiesException,
) -> JSONResponse:
    """Handle NoUserError / DeniedError raised by ability checks."""
    logger.warning(
        f"Ability check failed: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    details = None
    if isinstance(exc, DeniedError):
        details = {"required": list(exc.actions), "missing": list(exc.missing)}

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=details,
    )


def register_exception_handlers(app):
    """Register the ability error handlers with a FastAPI app."""
    app.add_exception_handler(AbilitiesException, abilities_exception_handler)
