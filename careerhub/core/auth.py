"""
Authentication Utility - JWT identity handling.

Provides:
- JWT token creation/verification
- FastAPI dependencies for protected routes

Tokens are issued by the platform's accounts service at login and carry
the user id and role. The platform's clients send them in the
`x-auth-token` header with an `id` claim; `Authorization: Bearer` and a
`sub` claim are accepted as well. This service never issues login tokens,
it only decodes them into a caller identity: {"user_id": str, "role": str}.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPBearer, HTTPAuthorizationCredentials

from careerhub.core.config import get_settings

settings = get_settings()

ROLES = ("student", "recruiter", "admin")

# Token extractors (either header may carry the token)
bearer_scheme = HTTPBearer(auto_error=False)
platform_token_scheme = APIKeyHeader(name="x-auth-token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    platform_token: Optional[str] = Depends(platform_token_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    token = credentials.credentials if credentials else platform_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token, authorization denied",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token is not valid",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub") or payload.get("id")
    role = payload.get("role")
    if not user_id or role not in ROLES:
        raise credentials_exception

    return {"user_id": str(user_id), "role": role}


async def get_current_recruiter(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require recruiter role."""
    if user["role"] != "recruiter":
        raise HTTPException(status_code=403, detail="Unauthorized")
    return user


async def get_current_staff(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require recruiter or admin role."""
    if user["role"] not in ("recruiter", "admin"):
        raise HTTPException(status_code=403, detail="Unauthorized")
    return user
