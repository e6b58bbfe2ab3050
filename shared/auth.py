"""Bearer JWT verification for the ride API.

Tokens are expected to carry the user pool username in the
``cognito:username`` claim; that claim is the rider identity.
"""
import os
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .logger import get_logger

logger = get_logger(__name__)

USERNAME_CLAIM = "cognito:username"

# A request without credentials is passed through as "no authorization context"
bearer_scheme = HTTPBearer(auto_error=False)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "ride-api")


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT, returning its claims.

    Raises:
        JWTError: If the signature, audience or expiry check fails
    """
    return jwt.decode(
        token,
        JWT_SECRET_KEY,
        algorithms=[JWT_ALGORITHM],
        audience=JWT_AUDIENCE,
    )


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Dict[str, Any]]:
    """Return the verified claims of the bearer token, or None when no token was sent.

    In production, configure JWT_SECRET_KEY / JWT_ALGORITHM / JWT_AUDIENCE via env
    or front the service with the identity provider's authorizer.
    """
    if credentials is None:
        return None

    try:
        return decode_token(credentials.credentials)
    except JWTError as exc:
        logger.warning("jwt_invalid", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def identity_from_claims(claims: Optional[Dict[str, Any]]) -> Optional[str]:
    """Extract the rider identity from verified claims; None unless it is a non-empty string."""
    if not claims:
        return None
    username = claims.get(USERNAME_CLAIM)
    if not isinstance(username, str) or not username:
        return None
    return username
