# Authentication and Authorization Dependencies

from fastapi import Request, Depends
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from typing import Optional
import logging

from storefront.db.redis import token_in_blocklist

from .utils import decode_token
from storefront.errors import (
    InvalidToken,
    AccessTokenRequired,
    Unauthorized
)

logger = logging.getLogger(__name__)


class Principal(BaseModel):
    uid: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool = False


class AuthContext:
    """The caller's identity as resolved for one request.

    Handlers receive this instead of reading tokens themselves, so the
    analytics code never touches authentication directly.
    """
    def __init__(self, principal: Optional[Principal] = None) -> None:
        self._principal = principal

    def current_principal(self) -> Optional[Principal]:
        return self._principal

    @property
    def is_admin(self) -> bool:
        return self._principal is not None and self._principal.is_admin


class TokenBearer(HTTPBearer):
    """Base class for JWT token validation.
    Extends FastAPI's HTTPBearer to add custom token validation logic.
    A missing Authorization header yields ``None`` rather than an error.
    """
    def __init__(self):
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> Optional[dict]:
        creds = await super().__call__(request)
        if creds is None:
            return None

        token_data = decode_token(creds.credentials)

        # Check if token has been revoked (e.g. after logout)
        if await token_in_blocklist(token_data.get('jti')):
            logger.warning(f"Revoked token presented: {token_data.get('jti')}")
            raise InvalidToken("token revoked")

        self.verify_token_data(token_data)
        return token_data

    def verify_token_data(self, token_data):
        """Abstract method for token-specific validation logic."""
        raise NotImplementedError("Please Override this method in child classes")


class AccessTokenBearer(TokenBearer):
    def verify_token_data(self, token_data: dict) -> None:
        if token_data.get("refresh"):
            raise AccessTokenRequired()


async def get_auth_context(
    token_details: Optional[dict] = Depends(AccessTokenBearer())
) -> AuthContext:
    if token_details is None:
        return AuthContext()

    user = token_details.get("user") or {}
    principal = Principal(
        uid=user.get("uid"),
        email=user.get("email"),
        is_admin=bool(user.get("is_admin", False))
    )
    return AuthContext(principal)


async def admin_role_checker(auth: AuthContext = Depends(get_auth_context)) -> Principal:
    """Reject anonymous and non-admin callers before any data access."""
    if not auth.is_admin:
        principal = auth.current_principal()
        logger.info(f"Admin access denied for {principal.email if principal else 'anonymous caller'}")
        raise Unauthorized()

    return auth.current_principal()
