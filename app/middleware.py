import logging
from datetime import datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_HOURS, SUPERADMIN_ROLE_ID

logger = logging.getLogger(__name__)

security = HTTPBearer()


def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Verify JWT Bearer token from Authorization header.

    Returns user context dict with: user_id, role_id, admin_id
    """
    token = credentials.credentials

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "TOKEN_EXPIRED",
                "message": "Session expired. Please log in again.",
            },
        )
    except jwt.InvalidTokenError as e:
        logger.error(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "INVALID_TOKEN",
                "message": "Invalid token",
            },
        )

    # Check token type
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "INVALID_TOKEN_TYPE",
                "message": "Invalid token",
            },
        )

    return {
        "user_id": payload.get("user_id"),
        "role_id": payload.get("role_id"),
        "admin_id": payload.get("admin_id"),
    }


def create_access_token(data: dict, expires_hours: int = ACCESS_TOKEN_EXPIRE_HOURS) -> str:
    """
    Create JWT access token.

    Args:
        data: dict containing user_id, role_id, admin_id
        expires_hours: token expiration time in hours (default 24)

    Returns:
        JWT token string
    """
    to_encode = {
        "user_id": data.get("user_id"),
        "role_id": data.get("role_id"),
        "admin_id": data.get("admin_id"),
    }

    expire = datetime.utcnow() + timedelta(hours=expires_hours)
    to_encode.update({
        "exp": expire,
        "type": "access",
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def resolve_admin_id(auth: dict, admin_id=None) -> int:
    """
    Tenant scope for admin endpoints: the token's admin_id, then the caller
    itself (an admin account is its own tenant). An explicit admin_id is only
    honoured for superadmins.
    """
    if admin_id and auth.get("role_id") == SUPERADMIN_ROLE_ID:
        return admin_id
    return auth.get("admin_id") or auth.get("user_id")
