# JWT utilities

from datetime import timedelta, datetime, timezone
from typing import Optional
from storefront.errors import InvalidToken
from storefront.config import Config
import jwt  # JSON Web Token implementation
import uuid
import logging

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRY = timedelta(minutes=Config.ACCESS_TOKEN_EXPIRY_MINUTES)


def create_access_token(user_data: dict, expiry: Optional[timedelta] = None, refresh: bool = False) -> str:
    """Create a signed JWT in the shape the identity provider issues.

    Args:
        user_data (dict): Principal claims (``uid``, ``email``, ``is_admin``)
        expiry (timedelta, optional): Custom lifetime. Defaults to ACCESS_TOKEN_EXPIRY
        refresh (bool, optional): Whether this is a refresh token. Defaults to False

    Returns:
        str: Encoded JWT token
    """
    payload = {
        'user': user_data,
        'exp': datetime.now(timezone.utc) + (expiry if expiry is not None else ACCESS_TOKEN_EXPIRY),
        'jti': str(uuid.uuid4()),  # Unique token identifier for blocklisting
        'refresh': refresh
    }

    return jwt.encode(
        payload = payload,
        key = Config.JWT_SECRET,
        algorithm = Config.JWT_ALGORITHM
    )


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        InvalidToken: If the token is empty, malformed, badly signed or expired
    """
    if not token:
        raise InvalidToken("empty token")

    try:
        return jwt.decode(
            jwt = token,
            key = Config.JWT_SECRET,
            algorithms = [Config.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError as e:
        logger.warning(f"Token expired: {str(e)}")
        raise InvalidToken("token expired") from e
    except jwt.PyJWTError as e:
        logger.error(f"JWT error: {str(e)}")
        raise InvalidToken("token rejected") from e
