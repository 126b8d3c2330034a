import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StorefrontError(HTTPException):
    """Base for every error that is rendered into the response envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        data: Any = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(
            status_code=status_code or self.status_code,
            detail=message or self.default_message,
            headers=headers,
        )
        self.data = data

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None, **kwargs):
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class AuthorizationError(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This order has already been processed"


class InternalError(StorefrontError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class GatewayError(StorefrontError):
    """Upstream payment provider failure.

    Carries the provider's HTTP status and raw response body so the failure
    can be diagnosed from logs without replaying the call.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment provider request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        provider_status: Optional[int] = None,
        response: Any = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.provider_status = provider_status
        self.response = response


class GatewayAuthError(GatewayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Payment verification credentials are not configured"


class GatewayVerificationError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment verification failed"


def envelope(success: bool, message: Optional[str] = None, data: Any = None, error: Optional[str] = None) -> dict:
    body = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = envelope(
        False,
        message=str(exc.detail),
        data=jsonable_encoder(getattr(exc, "data", None)),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope(False, message=message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(False, message=InternalError.default_message, error=str(exc)),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
