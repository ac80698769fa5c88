from typing import Any, Callable
from fastapi import FastAPI, status
from fastapi.requests import Request
from fastapi.responses import JSONResponse


class StorefrontException(Exception):
    """This is the base class for all storefront errors"""
    pass


class InvalidToken(StorefrontException):
    """User has been provided an invalid, expired or revoked token"""
    pass


class AccessTokenRequired(StorefrontException):
    """User has been provided a refresh token when an access token is needed"""
    pass


class Unauthorized(StorefrontException):
    """No authenticated principal, or the principal is not an administrator"""
    pass


class AnalyticsUnavailable(StorefrontException):
    """Aggregation failed or timed out; nothing partial is returned"""
    pass


def create_exception_handler(status_code: int, initial_detail: Any) -> Callable[[Request, Exception], JSONResponse]:
    async def exception_handler(request: Request, exc: StorefrontException):
        return JSONResponse(
            content=initial_detail,
            status_code=status_code
        )

    return exception_handler


UNAUTHORIZED_BODY = {"success": False, "error": "Unauthorized"}
INTERNAL_ERROR_BODY = {"success": False, "error": "Internal server error"}


def register_all_errors(app: FastAPI):
    # Every auth failure looks the same to the caller
    for exc_class in (InvalidToken, AccessTokenRequired, Unauthorized):
        app.add_exception_handler(
            exc_class,
            create_exception_handler(
                status_code=status.HTTP_401_UNAUTHORIZED,
                initial_detail=UNAUTHORIZED_BODY
            )
        )

    app.add_exception_handler(
        AnalyticsUnavailable,
        create_exception_handler(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            initial_detail=INTERNAL_ERROR_BODY
        )
    )

    @app.exception_handler(500)
    async def internal_server_error_handler(request, exc):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=INTERNAL_ERROR_BODY
        )

    @app.exception_handler(404)
    async def not_found_error_handler(request, exc):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "error": "Not found"}
        )
