"""Authentication middleware and helpers."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from passlib.context import CryptContext
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _unauthorized(request: Request, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "errors": [{
                "status": "401",
                "code": code,
                "title": "Unauthorized",
                "detail": message,
                "source": {"pointer": request.url.path}
            }]
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Resolves a Bearer JWT into the request's user context.

    A request without a token passes through unauthenticated; the storefront is
    public and protected routes reject it in their dependencies. A token that is
    present but invalid is rejected here with 401.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request and validate authentication."""
        request.state.user_id = None
        request.state.tenant_id = None
        request.state.user_role = None

        authorization = request.headers.get("Authorization")
        if not authorization:
            return await call_next(request)

        if not authorization.startswith("Bearer "):
            logger.warning(f"Invalid authorization format for {request.url.path}")
            return _unauthorized(
                request,
                "INVALID_AUTHORIZATION_FORMAT",
                "Authorization must be in 'Bearer <token>' format",
            )

        token = authorization.split(" ", 1)[1]

        try:
            payload = decode_access_token(token)
        except JWTError as e:
            logger.warning(f"JWT validation failed for {request.url.path}: {e}")
            return _unauthorized(request, "INVALID_JWT_TOKEN", "Invalid or expired JWT token")

        user_id = payload.get("sub")
        try:
            uuid.UUID(str(user_id))
        except ValueError:
            return _unauthorized(request, "INVALID_TOKEN_PAYLOAD", "Token must contain a valid 'sub' claim")

        request.state.user_id = user_id
        request.state.tenant_id = payload.get("tenant_id")
        request.state.user_role = payload.get("role", "tenant")

        logger.debug(f"Authenticated user {user_id} for {request.url.path}")

        return await call_next(request)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str) -> dict:
    """Decode and verify a token. Raises ``JWTError`` when invalid or expired."""
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm]
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)
