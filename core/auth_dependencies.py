"""
FastAPI Authentication Dependencies for Microservices

Shared dependencies that turn an `Authorization: Bearer <token>` header into
an Actor. The raw token is kept on the Actor so that record-store calls run
under the caller's identity and row-level security applies.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, status

from core.backend_client import BackendNotConfiguredError
from core.jwt_manager import JWTManager, get_jwt_manager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Authenticated caller"""
    user_id: str
    access_token: str
    email: Optional[str] = None


def get_token_verifier() -> JWTManager:
    """Token verifier dependency (overridable in tests)"""
    try:
        return get_jwt_manager()
    except ValueError as e:
        raise BackendNotConfiguredError(
            "Backend credentials are not configured. Set SUPABASE_JWT_SECRET in the environment."
        ) from e


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an Authorization header, or None"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def optional_actor(
    authorization: Optional[str] = Header(None),
    verifier: JWTManager = Depends(get_token_verifier),
) -> Optional[Actor]:
    """
    Optional authentication: anonymous callers get None

    An invalid token is rejected rather than silently downgraded to anonymous.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None

    claims = verifier.get_claims(token)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired access token",
        )
    return Actor(user_id=claims.user_id, access_token=token, email=claims.email)


async def require_actor(actor: Optional[Actor] = Depends(optional_actor)) -> Actor:
    """Required authentication"""
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User authentication required",
        )
    return actor


__all__ = [
    "Actor",
    "get_token_verifier",
    "extract_bearer_token",
    "optional_actor",
    "require_actor",
]
