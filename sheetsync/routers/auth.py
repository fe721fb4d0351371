from fastapi import APIRouter, Depends, HTTPException

from sheetsync.dependencies import get_token_service, get_user_store
from sheetsync.errors import InvalidToken
from sheetsync.log import get_logger
from sheetsync.models.schemas import AuthRequest, RefreshRequest
from sheetsync.models.user import UserResponse
from sheetsync.services.jwt import TokenService, create_access_token, create_user_tokens
from sheetsync.services.stores import UserStore

logger = get_logger(__name__)

router = APIRouter()


@router.post("/login", response_model=dict, summary="Get JWT tokens",
             description="Authenticate with a login (or mail) and a password.")
async def login(auth_request: AuthRequest, users: UserStore = Depends(get_user_store)):
    """
    Returns an access token, a refresh token and the authenticated user.
    The access token is the one clients send back in reply to authReq on the socket.
    """
    user = users.authenticate(auth_request.login, auth_request.password)
    if user is None:
        logger.info("Failed login for %r", auth_request.login)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    tokens = create_user_tokens(user.id)
    tokens["user"] = UserResponse.model_validate(user).model_dump(by_alias=True)
    return tokens


@router.post("/refresh-token", response_model=dict, summary="Refresh the JWT access token")
async def refresh_token(request: RefreshRequest, tokens: TokenService = Depends(get_token_service)):
    try:
        user_id = tokens.verify(request.refresh_token, token_type="refresh")
    except InvalidToken:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    return {"access_token": create_access_token({"sub": str(user_id)}), "token_type": "bearer"}
