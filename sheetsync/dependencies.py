from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from sheetsync.errors import InvalidToken
from sheetsync.services.jwt import TokenService
from sheetsync.services.stores import UserStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def get_token_service() -> TokenService:
    return TokenService()


def get_user_store() -> UserStore:
    return UserStore()


def get_current_user_id(
    token: str = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """Resolve the Bearer token of the request to a user id."""
    try:
        return tokens.verify(token)
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
