# user_api/auth.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Header, Request
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError

from user_api.config import Settings, get_settings
from user_api.errors import ErrorKind, ServiceError
from user_api.schemas.user_schemas import TokenClaims

logger = logging.getLogger(__name__)


# --- PASSWORD HASHING ---

def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hashes a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds or get_settings().BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Checks a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# --- TOKENS ---

def create_access_token(
    user_id: str,
    role: str,
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Signs a token carrying the user id and role."""
    settings = settings or get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    issued_at = datetime.now(timezone.utc)
    claims = {
        "userId": user_id,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str, settings: Optional[Settings] = None) -> TokenClaims:
    """Verifies a token's signature and expiry and returns its claims."""
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise ServiceError(ErrorKind.TOKEN_EXPIRED, "Token has expired.")
    except JWTError:
        raise ServiceError(ErrorKind.TOKEN_INVALID, "Invalid token.")

    user_id = payload.get("userId")
    role = payload.get("role")
    if not user_id or role is None:
        raise ServiceError(ErrorKind.TOKEN_INVALID, "Invalid token.")
    try:
        return TokenClaims(user_id=user_id, role=role)
    except ValueError:
        raise ServiceError(ErrorKind.TOKEN_INVALID, "Invalid token.")


# --- ACCESS CONTROL ---

def ensure_role(required_role: str, caller_role) -> None:
    """Raises AUTHORIZATION_DENIED unless the caller holds exactly the required role."""
    if caller_role != required_role:
        logger.warning(f"Access denied: required role '{required_role}', caller presented '{caller_role}'.")
        raise ServiceError(ErrorKind.AUTHORIZATION_DENIED, "Access denied.")

async def _read_json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise ServiceError(ErrorKind.TOKEN_INVALID, "Not authenticated.")
    return authorization.replace("Bearer ", "", 1)

def require_role(required_role: str):
    """
    Builds a dependency that gates an endpoint on `required_role`.

    With ROLE_SOURCE=body the caller's role is whatever the request body claims, which
    any client can forge. With ROLE_SOURCE=token the role comes from the claims of a verified bearer token.
    """
    async def guard(
        request: Request,
        authorization: Optional[str] = Header(None),
        settings: Settings = Depends(get_settings),
    ) -> str:
        if settings.ROLE_SOURCE == "token":
            claims = decode_access_token(_bearer_token(authorization), settings)
            caller_role = claims.role.value
        else:
            caller_role = (await _read_json_body(request)).get("role")
        ensure_role(required_role, caller_role)
        return caller_role

    return guard
