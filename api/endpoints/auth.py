"""
Receipegram Authentication Endpoints
Registration, login and the caller's own profile
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from services.auth_service import auth_service
from schemas.auth_schemas import (
    UserCreate, UserLogin, UserUpdate, User, AuthResponse,
    ProfileResponse, ProfileUpdateResponse
)
from utils.request_utils import get_client_ip

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user account

    Returns a bearer token so the client is signed in right away
    """
    user, token = await auth_service.register_user(user_data, db)

    return AuthResponse(
        message="User created successfully",
        token=token,
        user=User.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Authenticate by username or email and return a bearer token"""
    user, token = await auth_service.authenticate_user(login_data, db)
    logger.info(f"User logged in: {user.username}", extra={"ip": get_client_ip(request)})

    return AuthResponse(
        message="Login successful",
        token=token,
        user=User.model_validate(user),
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's own profile"""
    user = await auth_service.get_user(identity.id, db)
    return ProfileResponse(user=User.model_validate(user))


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    update_data: UserUpdate,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's full name and bio"""
    user = await auth_service.update_profile(identity.id, update_data, db)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=User.model_validate(user),
    )
