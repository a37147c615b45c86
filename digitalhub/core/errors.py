"""
Domain exceptions and their HTTP rendering.

Services raise these; routers let them propagate and the handler registered
in ``create_app`` turns them into ``{"success": false, "error": ...}``.
"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class HubError(Exception):
    """Base exception for marketplace operations"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(HubError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(HubError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(HubError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(HubError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(HubError):
    status_code = status.HTTP_409_CONFLICT


class GatewayError(HubError):
    """Raised when the payment gateway is unreachable or rejects a call"""

    status_code = status.HTTP_502_BAD_GATEWAY


async def hub_error_handler(request: Request, exc: HubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )
