"""
Session tokens (JWT) and request authentication dependencies
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status

from event_booking.core.config import settings
from event_booking.models.user import UserRole


@dataclass(frozen=True)
class CurrentUser:
    """Identity extracted from a verified session token"""

    id: int
    name: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class AuthenticationError(HTTPException):
    """Raised when the session token is missing or invalid"""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """Raised when an authenticated user lacks the required role"""

    def __init__(self, detail: str = "Admin access required"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed session token carrying the user's identity and role"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
    payload = {
        "sub": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid token") from e


def extract_token(request: Request) -> Optional[str]:
    """Token from the session cookie, falling back to a Bearer header"""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


async def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: verified identity of the caller"""
    token = extract_token(request)
    if not token:
        raise AuthenticationError("Not authorized, no token")

    payload = decode_access_token(token)
    try:
        user = CurrentUser(
            id=int(payload["sub"]),
            name=payload.get("name", ""),
            email=payload["email"],
            role=UserRole(payload.get("role", UserRole.USER.value)),
        )
    except (KeyError, ValueError) as e:
        raise AuthenticationError("Invalid token") from e

    request.state.user_id = user.id
    return user


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """FastAPI dependency: caller must hold the ADMIN role"""
    if not current_user.is_admin:
        raise AuthorizationError()
    return current_user
