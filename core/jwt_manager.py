"""
JWT Token Manager for SocietyFixer

Verifies access tokens issued by the hosted identity provider. Tokens are
signed with the project's JWT secret and carry the user id in `sub`.
"""

import jwt
import logging
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    """Claims extracted from a verified access token"""
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    expires_at: Optional[datetime] = None


class JWTManager:
    """
    Access token verifier

    Features:
    - Verifies signature, expiry and audience of provider-issued tokens
    - Returns the platform's {valid, user_id, email, ...} result dict
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        audience: Optional[str] = "authenticated",
    ):
        """
        Initialize JWT Manager

        Args:
            secret_key: Secret used by the identity provider to sign tokens
            algorithm: JWT algorithm (default: HS256)
            audience: Expected `aud` claim (None disables the check)
        """
        if not secret_key:
            raise ValueError("JWT secret is required to verify access tokens")

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.audience = audience

    def verify_token(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        """
        Verify and decode an access token

        Args:
            token: JWT token string
            verify_exp: Verify expiration (default: True)

        Returns:
            Dictionary with verification result and payload
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={
                    "verify_exp": verify_exp,
                    "verify_aud": self.audience is not None,
                },
            )

            if not payload.get("sub"):
                return {"valid": False, "error": "Token has no subject"}

            return {
                "valid": True,
                "payload": payload,
                "user_id": payload.get("sub"),
                "email": payload.get("email"),
                "role": payload.get("role"),
                "expires_at": datetime.fromtimestamp(payload.get("exp", 0), tz=timezone.utc),
            }

        except jwt.ExpiredSignatureError:
            return {
                "valid": False,
                "error": "Token has expired"
            }
        except jwt.InvalidAudienceError:
            return {
                "valid": False,
                "error": "Invalid token audience"
            }
        except jwt.InvalidTokenError as e:
            return {
                "valid": False,
                "error": f"Invalid token: {str(e)}"
            }

    def get_claims(self, token: str) -> Optional[TokenClaims]:
        """Verify a token and return its claims, or None when invalid"""
        result = self.verify_token(token)
        if not result.get("valid"):
            logger.debug(f"Rejected access token: {result.get('error')}")
            return None
        return TokenClaims(
            user_id=result["user_id"],
            email=result.get("email"),
            role=result.get("role"),
            expires_at=result.get("expires_at"),
        )


# Singleton instance for application-wide use
_jwt_manager_instance: Optional[JWTManager] = None


def get_jwt_manager(
    secret_key: Optional[str] = None,
    algorithm: str = "HS256",
    audience: Optional[str] = "authenticated",
) -> JWTManager:
    """
    Get or create JWT manager singleton instance

    Args:
        secret_key: Secret key for verifying tokens (defaults to backend config)
        algorithm: JWT algorithm
        audience: Expected audience

    Returns:
        JWTManager instance
    """
    global _jwt_manager_instance

    if _jwt_manager_instance is None:
        if secret_key is None:
            from core.config import get_settings
            backend = get_settings().backend
            secret_key = backend.jwt_secret
            algorithm = backend.jwt_algorithm
            audience = backend.jwt_audience
        _jwt_manager_instance = JWTManager(
            secret_key=secret_key,
            algorithm=algorithm,
            audience=audience,
        )

    return _jwt_manager_instance
