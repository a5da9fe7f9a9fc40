"""
Receipegram Social Service
Public profiles, the follow graph and user search
"""

from typing import Any, Dict, List

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from core.exceptions import NotFoundError, StorageError, ValidationError
from models.recipe_models import Recipe
from models.users import Follower, User
from services.auth_service import Identity

logger = structlog.get_logger()

SEARCH_LIMIT = 20


def user_summary(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "profile_image": user.profile_image,
        "bio": user.bio,
    }


class SocialService:
    """Follow graph operations and profile lookups"""

    async def _ensure_user(self, db: AsyncSession, user_id: int) -> None:
        result = await db.execute(select(User.id).where(User.id == user_id))
        if result.first() is None:
            raise NotFoundError("User not found")

    async def public_profile(self, db: AsyncSession, username: str) -> Dict[str, Any]:
        """Profile by username with recipe and follow counts"""
        recipe_count = (
            select(func.count(Recipe.id))
            .where(Recipe.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        followers_count = (
            select(func.count(Follower.id))
            .where(Follower.following_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        following_count = (
            select(func.count(Follower.id))
            .where(Follower.follower_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )

        row = (
            await db.execute(
                select(
                    User,
                    recipe_count.label("recipe_count"),
                    followers_count.label("followers_count"),
                    following_count.label("following_count"),
                ).where(User.username == username)
            )
        ).first()
        if row is None:
            raise NotFoundError("User not found")

        user, recipes, followers, following = row
        profile = user_summary(user)
        profile.update(
            email=user.email,
            created_at=user.created_at,
            recipe_count=recipes or 0,
            followers_count=followers or 0,
            following_count=following or 0,
        )
        return profile

    async def toggle_follow(self, db: AsyncSession, identity: Identity, user_id: int) -> bool:
        """Flip the caller's follow edge towards user_id; returns isFollowing"""
        if user_id == identity.id:
            raise ValidationError("Cannot follow yourself")

        await self._ensure_user(db, user_id)

        if await self.is_following(db, identity, user_id):
            await db.execute(
                delete(Follower).where(
                    Follower.follower_id == identity.id,
                    Follower.following_id == user_id,
                )
            )
            following = False
        else:
            db.add(Follower(follower_id=identity.id, following_id=user_id))
            following = True

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.error("Follow toggle conflict", follower_id=identity.id, following_id=user_id, error=str(e))
            raise StorageError("Database error") from e

        logger.info("Follow toggled", follower_id=identity.id, following_id=user_id, following=following)
        return following

    async def is_following(self, db: AsyncSession, identity: Identity, user_id: int) -> bool:
        result = await db.execute(
            select(Follower.id).where(
                Follower.follower_id == identity.id,
                Follower.following_id == user_id,
            )
        )
        return result.first() is not None

    async def followers(self, db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
        """Users following user_id, most recent edge first"""
        result = await db.execute(
            select(User)
            .join(Follower, Follower.follower_id == User.id)
            .where(Follower.following_id == user_id)
            .order_by(Follower.created_at.desc(), Follower.id.desc())
        )
        return [user_summary(user) for user in result.scalars().all()]

    async def following(self, db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
        """Users that user_id follows, most recent edge first"""
        result = await db.execute(
            select(User)
            .join(Follower, Follower.following_id == User.id)
            .where(Follower.follower_id == user_id)
            .order_by(Follower.created_at.desc(), Follower.id.desc())
        )
        return [user_summary(user) for user in result.scalars().all()]

    async def search_users(self, db: AsyncSession, query: str) -> List[Dict[str, Any]]:
        pattern = f"%{query}%"
        result = await db.execute(
            select(User)
            .where(or_(User.username.like(pattern), User.full_name.like(pattern)))
            .order_by(User.username)
            .limit(SEARCH_LIMIT)
        )
        return [user_summary(user) for user in result.scalars().all()]


social_service = SocialService()
