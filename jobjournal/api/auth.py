# jobjournal/api/auth.py
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobjournal.models.user import TokenOut
from jobjournal.repositories.users import UserRepository, get_user_repository
from jobjournal.services.auth import (
    InvalidTokenError,
    TokenUser,
    authenticate_user,
    issue_token,
    token_user,
    verify_auth_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# auto_error=False so a missing header is a 401 like any other bad token
security = HTTPBearer(auto_error=False)


def _unauthorized(message: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_jwt(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> TokenUser:
    """Dependency guarding JWT-only routes; yields the token's user claim."""
    if credentials is None:
        raise _unauthorized()
    try:
        return verify_auth_token(credentials.credentials)
    except InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized()


@router.post("/login", response_model=TokenOut)
async def login(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    repo: UserRepository = Depends(get_user_repository),
):
    payload = payload or {}
    username = payload.get("username")
    password = payload.get("password")
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bad Request")

    user = await authenticate_user(repo, username, password)
    if not user:
        raise _unauthorized("Incorrect username or password")
    return {"authToken": issue_token(token_user(user))}


@router.post("/refresh", response_model=TokenOut)
async def refresh(user: TokenUser = Depends(require_jwt)):
    return {"authToken": issue_token(user)}
