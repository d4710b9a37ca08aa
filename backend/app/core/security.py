"""
Password hashing and bearer tokens for dashboard operators
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings
from app.core.exceptions import AuthenticationError

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72
TOKEN_TYPE = "access"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    """Hash with BCRYPT_ROUNDS (4 in tests, 12 in production)"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))


def create_access_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign a bearer token for ``subject`` (the user id).

    Extra ``claims`` (email, role) are informational; authorization always
    re-reads the user row.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = dict(claims or {})
    payload.update({
        "sub": str(subject),
        "type": TOKEN_TYPE,
        "exp": datetime.utcnow() + lifetime,
    })
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature, expiry and token type; raises AuthenticationError"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Could not validate credentials")

    if payload.get("type") != TOKEN_TYPE or not payload.get("sub"):
        raise AuthenticationError("Invalid token")
    return payload
