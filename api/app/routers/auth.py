"""
Authentication Endpoints & Current-User Dependencies

The caller identifies itself with the `X-User-Id` header; issuing and
verifying sessions happens in front of this service.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from typing import Optional
import logging

from app.models import User
from app.schemas.user import LoginRequest, UserCreate, UserResponse
from app.services.activity import log_activity
from app.storage import Storage, get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    storage: Storage = Depends(get_storage),
) -> User:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user = await storage.users.get_user(x_user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    request: Request,
    storage: Storage = Depends(get_storage),
):
    """
    Create a new account
    """
    if await storage.users.get_user_by_username(user_data.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

    user = await storage.users.create_user(user_data.model_dump(exclude_unset=True))
    await log_activity(storage, "register", user_id=user.id, entity_type="user", entity_id=user.id, request=request)

    return user


@router.post("/login", response_model=UserResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    storage: Storage = Depends(get_storage),
):
    """
    Check credentials and return the account
    """
    user = await storage.users.authenticate_user(credentials.username, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    await log_activity(storage, "login", user_id=user.id, entity_type="user", entity_id=user.id, request=request)
    logger.info(f"User logged in: {user.id}")

    return user
