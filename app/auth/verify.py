"""
verify.py
---------
Purpose:
    Supabase access-token verification for the project status API.

Notes:
    - Tokens are ES256-signed; keys come from the project's JWKS endpoint
      and are cached by PyJWKClient.
    - `auth_dependency` returns the decoded claims. Routes resolve the
      caller's application role from their profile, using `sub`.
"""

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from app.config import settings
from app.infrastructure.observability.logging import get_logger

SUPABASE_AUDIENCE = "authenticated"

logger = get_logger(__name__)

_jwk_client = PyJWKClient(settings.jwks_url(), cache_keys=True)
_security = HTTPBearer()


def verify_jwt(token: str) -> dict:
    try:
        signing_key = _jwk_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience=SUPABASE_AUDIENCE,
            options={"verify_exp": True, "require": ["sub", "exp"]},
        )
    except (jwt.PyJWTError, jwt.PyJWKClientError) as e:
        logger.info("Token rejected", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(_security)) -> dict:
    return verify_jwt(credentials.credentials)
