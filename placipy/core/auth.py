"""
Authentication Utility - bearer-token claims.

Identity comes from an external provider; this service only reads the
claims of the JWT it is handed.

Provides:
- JWT token creation (local use and tests) and verification
- FastAPI dependency exposing the caller's claims
- Helpers that pick the caller's email / display id out of the claims
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from placipy.core.config import Settings

# Bearer token extractor (we raise our own 401)
bearer_scheme = HTTPBearer(auto_error=False)

EMAIL_CLAIMS = ("email", "custom:email", "username", "cognito:username", "sub")


def create_access_token(settings: Settings, data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(settings: Settings, token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def caller_email(user: dict) -> Optional[str]:
    """First claim that looks like an email address, lowercased."""
    for claim in EMAIL_CLAIMS:
        value = user.get(claim)
        if isinstance(value, str) and "@" in value:
            return value.lower()
    return None


def caller_id(user: dict) -> Optional[str]:
    """Identifier recorded as createdBy / updatedBy."""
    return user.get("username") or user.get("sub") or user.get("email")


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - claims of the authenticated caller.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(request.app.state.settings, credentials.credentials)
    if not payload or not (payload.get("sub") or payload.get("username")):
        raise credentials_exception

    return payload
