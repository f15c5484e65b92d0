from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt

from app.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, REFRESH_TOKEN_EXPIRE_DAYS

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    payload = dict(claims)
    payload["exp"] = datetime.utcnow() + lifetime
    payload["type"] = token_type
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------
# Token issuing
# ---------------------------
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a short-lived access token.

    ``data`` must carry ``user_id`` (as str) and ``role``; the lifetime defaults
    to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    return _encode(data, ACCESS_TOKEN, expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, REFRESH_TOKEN, expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


# ---------------------------
# Verify token
# ---------------------------
def verify_token(token: str, expected_type: str = ACCESS_TOKEN) -> dict:
    """
    Decode a JWT and return its claims.

    Raises:
        JWTError: If the token is malformed, expired, or of another type.
    """
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise JWTError("Invalid or expired token") from e

    if claims.get("type") != expected_type:
        raise JWTError(f"Invalid token type. Expected '{expected_type}'.")
    return claims
