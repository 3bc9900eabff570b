# jobjournal/core/security.py
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import jwt

from jobjournal.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_auth_token(user: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the public user claim.

    ``user`` is the token identity (``{"id": ..., "username": ...}``); the
    username doubles as the ``sub`` claim.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRY_MINUTES))
    to_encode = {
        "user": user,
        "sub": user["username"],
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_token(token: str) -> Dict[str, Any]:
    # raises jose.JWTError (ExpiredSignatureError included) on a bad token
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
