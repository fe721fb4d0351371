# sheetsync/routers/users.py
from fastapi import APIRouter, Depends, HTTPException

from sheetsync.dependencies import get_current_user_id, get_user_store
from sheetsync.models.user import UserResponse
from sheetsync.services.stores import UserStore

router = APIRouter()


@router.get("/me", summary="Get the current user")
def read_me(user_id: int = Depends(get_current_user_id), users: UserStore = Depends(get_user_store)):
    user = users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user).model_dump(by_alias=True)
