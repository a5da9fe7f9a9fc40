"""
Receipegram User Endpoints
Public profiles, following and user search
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.dependencies import CurrentUser
from schemas.user_schemas import (
    PublicProfileResponse, FollowToggleResponse, FollowingStatusResponse,
    FollowersResponse, FollowingResponse, UserSearchResponse
)
from services.social_service import social_service

router = APIRouter()


# Declared before /{username} so "search" is never taken for a username
@router.get("/search/{query}", response_model=UserSearchResponse)
async def search_users(
    query: str,
    db: AsyncSession = Depends(get_db)
):
    """Search users by username or full name"""
    users = await social_service.search_users(db, query)
    return {"users": users}


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_user_profile(
    username: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a public profile with recipe and follow counts"""
    profile = await social_service.public_profile(db, username)
    return {"user": profile}


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    user_id: int,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Follow the user, or unfollow if the caller already does"""
    following = await social_service.toggle_follow(db, identity, user_id)
    return {
        "message": "Followed successfully" if following else "Unfollowed successfully",
        "is_following": following,
    }


@router.get("/{user_id}/following-status", response_model=FollowingStatusResponse)
async def get_following_status(
    user_id: int,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Whether the caller follows the user"""
    following = await social_service.is_following(db, identity, user_id)
    return {"is_following": following}


@router.get("/{user_id}/followers", response_model=FollowersResponse)
async def get_followers(
    user_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Users following this user"""
    followers = await social_service.followers(db, user_id)
    return {"followers": followers}


@router.get("/{user_id}/following", response_model=FollowingResponse)
async def get_following(
    user_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Users this user follows"""
    following = await social_service.following(db, user_id)
    return {"following": following}
