"""
Receipegram Social Schemas
Public profiles, follower lists and follow toggles
"""

from datetime import datetime
from typing import List, Optional

from schemas.common import CamelModel


class UserSummary(CamelModel):
    """Compact user entry used in follower lists and search results"""
    id: int
    username: str
    full_name: Optional[str] = ""
    profile_image: Optional[str] = None
    bio: Optional[str] = None


class PublicProfile(CamelModel):
    """Public profile with derived social stats"""
    id: int
    username: str
    email: str
    full_name: Optional[str] = ""
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None
    recipe_count: int = 0
    followers_count: int = 0
    following_count: int = 0


class PublicProfileResponse(CamelModel):
    user: PublicProfile


class FollowToggleResponse(CamelModel):
    message: str
    is_following: bool


class FollowingStatusResponse(CamelModel):
    is_following: bool


class FollowersResponse(CamelModel):
    followers: List[UserSummary]


class FollowingResponse(CamelModel):
    following: List[UserSummary]


class UserSearchResponse(CamelModel):
    users: List[UserSummary]
