from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import jwt
from jose.exceptions import JOSEError

from sheetsync import config
from sheetsync.errors import InvalidToken


def _encode(data: Dict, expires_delta: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES), "access")


def create_refresh_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, expires_delta or timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def create_user_tokens(user_id: int) -> Dict[str, str]:
    claims = {"sub": str(user_id)}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }


class TokenService:
    """Turns an opaque bearer token into the id of the user it was issued to."""

    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        self.secret_key = secret_key or config.SECRET_KEY
        self.algorithm = algorithm or config.ALGORITHM

    def verify(self, token, token_type: str = "access") -> int:
        """
        Return the user id carried by `token`.

        Raises InvalidToken for anything that is not a valid, unexpired token
        of the expected type; no other exception escapes.
        """
        if not isinstance(token, str) or not token:
            raise InvalidToken("token must be a non-empty string")
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JOSEError as e:
            raise InvalidToken(str(e)) from e

        if payload.get("type", "access") != token_type:
            raise InvalidToken(f"expected a {token_type} token")

        subject = payload.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError) as e:
            raise InvalidToken("token subject is not a user id") from e
