from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from uuid import UUID
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from agrosat.api.config import settings

# HTTP Bearer token scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    """Identity resolved from an auth-provider access token"""
    id: UUID
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.user_metadata.get("name") or "User"

    def as_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "email": self.email, "user_metadata": self.user_metadata}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    """
    Decode and validate an access token issued by the auth provider

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE
        )
        return payload

    except JWTError as e:
        raise _unauthorized(f"Invalid token: {e}")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """
    Dependency to resolve the calling user from the bearer token

    Usage:
        @router.get("/protected")
        async def protected_route(user: CurrentUser = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise _unauthorized("Unauthorized: No token")

    payload = decode_token(credentials.credentials)

    subject = payload.get("sub")
    if subject is None:
        raise _unauthorized("Could not validate credentials")

    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Could not validate credentials")

    return CurrentUser(
        id=user_id,
        email=payload.get("email"),
        user_metadata=payload.get("user_metadata") or {}
    )
