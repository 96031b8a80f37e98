"""
Auth Service Routes Registry

Defines service metadata and the public route table.
"""

SERVICE_METADATA = {
    "service_name": "auth_service",
    "version": "1.0.0",
    "tags": ['auth', 'identity', 'v1'],
    "capabilities": ['email_password_auth', 'password_recovery', 'session_refresh'],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/api/v1/auth/sign-in", "methods": ["POST"], "description": "Sign in with e-mail and password"},
    {"path": "/api/v1/auth/sign-up", "methods": ["POST"], "description": "Register a new account"},
    {"path": "/api/v1/auth/sign-out", "methods": ["POST"], "description": "Revoke the current session"},
    {"path": "/api/v1/auth/password-reset", "methods": ["POST"], "description": "Send a password-reset link"},
    {"path": "/api/v1/auth/password-update", "methods": ["POST"], "description": "Set a new password"},
    {"path": "/api/v1/auth/refresh", "methods": ["POST"], "description": "Refresh a session"},
    {"path": "/api/v1/auth/session", "methods": ["GET"], "description": "Current user"},
]


def get_route_summary():
    """Route metadata for service registration"""
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join([r["path"] for r in ROUTES]),
        "api_version": "v1",
        "base_path": "/api/v1/auth",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
