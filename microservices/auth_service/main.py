"""
Auth Service Main Application

FastAPI application for e-mail/password identity flows.
Port: 8201
"""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from core.auth_dependencies import extract_bearer_token
from core.backend_client import BackendNotConfiguredError
from core.config import get_settings

from .auth_service import PASSWORD_UPDATED_MESSAGE, AuthenticationService
from .factory import AuthServiceFactory
from .models import (
    HealthResponse,
    MessageResponse,
    PasswordResetRequest,
    PasswordUpdateRequest,
    RefreshRequest,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from .protocols import (
    AuthenticationError,
    IdentityProviderUnavailableError,
    InvalidCredentialsError,
    InvalidTokenError,
    PasswordUpdateError,
    RateLimitedError,
)
from .routes_registry import SERVICE_METADATA

settings = get_settings()
settings.logging.apply()
logger = logging.getLogger(__name__)

SERVICE_NAME = SERVICE_METADATA["service_name"]
SERVICE_PORT = settings.services.auth_service_port
SERVICE_VERSION = SERVICE_METADATA["version"]

factory: Optional[AuthServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")
    try:
        factory = AuthServiceFactory(settings)
        await factory.initialize()
    except BackendNotConfiguredError as e:
        logger.error(f"{SERVICE_NAME} started without a backend: {e}")
        factory = None

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    if factory:
        await factory.close()


app = FastAPI(
    title="Auth Service",
    description="E-mail/password authentication over the hosted identity provider",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _error(status.HTTP_401_UNAUTHORIZED, exc)


@app.exception_handler(InvalidTokenError)
async def invalid_token_handler(request: Request, exc: InvalidTokenError):
    return _error(status.HTTP_401_UNAUTHORIZED, exc)


@app.exception_handler(PasswordUpdateError)
async def password_update_handler(request: Request, exc: PasswordUpdateError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(RateLimitedError)
async def rate_limited_handler(request: Request, exc: RateLimitedError):
    return _error(status.HTTP_429_TOO_MANY_REQUESTS, exc)


@app.exception_handler(IdentityProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: IdentityProviderUnavailableError):
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return _error(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(BackendNotConfiguredError)
async def backend_not_configured_handler(request: Request, exc: BackendNotConfiguredError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An unexpected error occurred. Please try again later.",
            "type": type(exc).__name__,
        },
    )


# ====================
# Dependencies
# ====================


def get_auth_service() -> AuthenticationService:
    if not factory:
        raise BackendNotConfiguredError()
    return factory.service


def require_bearer(authorization: Optional[str] = Header(None)) -> str:
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User authentication required",
        )
    return token


# ====================
# Health
# ====================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}
    service_status = "healthy"

    if factory:
        try:
            provider_healthy = await factory.service.health_check()
        except Exception as e:
            logger.warning(f"Identity provider health check failed: {e}")
            provider_healthy = False
        dependencies["identity_provider"] = "healthy" if provider_healthy else "unhealthy"
        if not provider_healthy:
            service_status = "degraded"
    else:
        dependencies["identity_provider"] = "not_configured"
        service_status = "degraded"

    return HealthResponse(
        status=service_status,
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


# ====================
# Auth Endpoints
# ====================


@app.post("/api/v1/auth/sign-in", response_model=SessionResponse, tags=["Auth"])
async def sign_in(
    request: SignInRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    session = await service.sign_in(request)
    return SessionResponse(session=session, user=session.user)


@app.post(
    "/api/v1/auth/sign-up",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Auth"],
)
async def sign_up(
    request: SignUpRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    return await service.sign_up(request)


@app.post("/api/v1/auth/sign-out", response_model=MessageResponse, tags=["Auth"])
async def sign_out(
    token: str = Depends(require_bearer),
    service: AuthenticationService = Depends(get_auth_service),
):
    await service.sign_out(token)
    return MessageResponse(message="Signed out")


@app.post("/api/v1/auth/password-reset", response_model=MessageResponse, tags=["Auth"])
async def request_password_reset(
    request: PasswordResetRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    message = await service.request_password_reset(request)
    return MessageResponse(message=message)


@app.post("/api/v1/auth/password-update", response_model=MessageResponse, tags=["Auth"])
async def update_password(
    request: PasswordUpdateRequest,
    token: str = Depends(require_bearer),
    service: AuthenticationService = Depends(get_auth_service),
):
    await service.update_password(token, request)
    return MessageResponse(message=PASSWORD_UPDATED_MESSAGE)


@app.post("/api/v1/auth/refresh", response_model=SessionResponse, tags=["Auth"])
async def refresh_session(
    request: RefreshRequest,
    service: AuthenticationService = Depends(get_auth_service),
):
    session = await service.refresh(request.refresh_token)
    return SessionResponse(session=session, user=session.user)


@app.get("/api/v1/auth/session", response_model=SessionResponse, tags=["Auth"])
async def current_session(
    token: str = Depends(require_bearer),
    service: AuthenticationService = Depends(get_auth_service),
):
    user = await service.get_user(token)
    return SessionResponse(user=user)


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.auth_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
