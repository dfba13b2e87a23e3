from typing import Any, Dict, Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from servicehub.core.config import settings

logger = logging.getLogger(__name__)

# Tokens are issued by the identity provider; this URL only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")

ADMIN_ROLE = "admin"

async def get_current_user(token: str = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """Get current user from token.

    The identity provider signs tokens of the shape
    ``{ sub: <user id>, role: "customer" | "admin", email?: ... }``.
    No session lookup happens here; the signed claims are trusted as-is.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError as jwt_error:
        logger.warning(f"JWT decode error: {jwt_error}")
        raise credentials_exception

    subject: Optional[str] = payload.get("sub")
    if subject is None:
        raise credentials_exception

    return {
        "_id": subject,
        "role": payload.get("role", "customer"),
        "email": payload.get("email"),
    }

async def get_current_admin(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Require the current user to hold the admin role."""
    if current_user.get("role") != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
