# jobjournal/services/auth.py
from typing import Any, Dict, Optional
from jose import JWTError
from pydantic import BaseModel

from jobjournal.core.security import create_auth_token, decode_token, verify_password
from jobjournal.repositories.users import UserRepository


class TokenUser(BaseModel):
    id: Optional[str] = None
    username: str


class InvalidTokenError(Exception):
    pass


def token_user(user: Dict[str, Any]) -> TokenUser:
    return TokenUser(id=str(user["_id"]), username=user["username"])


async def authenticate_user(repo: UserRepository, username: str, password: str) -> Optional[Dict[str, Any]]:
    """Local strategy: the stored user when the password matches, else None."""
    user = await repo.find_by_username(username)
    if not user or not user.get("password"):
        return None
    if not verify_password(password, user["password"]):
        return None
    return user


def verify_auth_token(token: str) -> TokenUser:
    """JWT strategy: the ``user`` claim of a valid, unexpired token."""
    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    claim = payload.get("user")
    if not isinstance(claim, dict) or not claim.get("username"):
        raise InvalidTokenError("token carries no user claim")
    return TokenUser(id=claim.get("id"), username=claim["username"])


def issue_token(user: TokenUser) -> str:
    return create_auth_token(user.model_dump())
