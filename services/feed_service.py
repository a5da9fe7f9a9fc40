"""
Receipegram Feed Service
Visibility-scoped, filtered and paginated recipe queries with engagement
counts and per-caller like annotation
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from core.exceptions import NotFoundError
from models.recipe_models import Comment, Like, Recipe, Visibility
from models.users import Follower, User
from services.auth_service import Identity

logger = structlog.get_logger()


@dataclass
class FeedFilters:
    """Optional AND-ed filters applied over the visible set"""
    search: Optional[str] = None
    tags: Optional[str] = None
    difficulty: Optional[str] = None
    user_id: Optional[int] = None
    following: bool = False


def recipe_query() -> Select:
    """Recipe joined with its author and live like/comment counts"""
    like_count = (
        select(func.count(Like.id))
        .where(Like.recipe_id == Recipe.id)
        .correlate(Recipe)
        .scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.recipe_id == Recipe.id)
        .correlate(Recipe)
        .scalar_subquery()
    )

    return (
        select(
            Recipe,
            User.username,
            User.full_name,
            User.profile_image,
            like_count.label("like_count"),
            comment_count.label("comment_count"),
        )
        .join(User, Recipe.user_id == User.id)
    )


def visibility_clause(identity: Optional[Identity]):
    """
    Recipes the caller may see in the feed

    Anonymous callers see public recipes only. Authenticated callers also see
    friends-only recipes of authors they follow, and all of their own.
    """
    if identity is None:
        return Recipe.visibility == Visibility.PUBLIC.value

    follows_author = (
        select(Follower.id)
        .where(
            Follower.follower_id == identity.id,
            Follower.following_id == Recipe.user_id,
        )
        .exists()
    )
    return or_(
        Recipe.visibility == Visibility.PUBLIC.value,
        and_(Recipe.visibility == Visibility.FRIENDS.value, follows_author),
        Recipe.user_id == identity.id,
    )


def _like_pattern(term: str) -> str:
    return f"%{term}%"


def apply_filters(stmt: Select, filters: FeedFilters) -> Select:
    if filters.search:
        pattern = _like_pattern(filters.search)
        stmt = stmt.where(
            or_(
                Recipe.title.like(pattern),
                Recipe.description.like(pattern),
                Recipe.ingredients.like(pattern),
                Recipe.tags.like(pattern),
            )
        )

    if filters.tags:
        stmt = stmt.where(Recipe.tags.like(_like_pattern(filters.tags)))

    if filters.difficulty:
        stmt = stmt.where(Recipe.difficulty == filters.difficulty)

    if filters.user_id is not None:
        stmt = stmt.where(Recipe.user_id == filters.user_id)

    return stmt


def serialize_recipe(row: Any, is_liked: bool = False) -> Dict[str, Any]:
    """Flatten a recipe_query() row into the feed item shape"""
    recipe, username, full_name, profile_image, like_count, comment_count = row
    return {
        "id": recipe.id,
        "user_id": recipe.user_id,
        "title": recipe.title,
        "description": recipe.description,
        "ingredients": recipe.ingredients,
        "instructions": recipe.instructions,
        "video_path": recipe.video_path,
        "image_path": recipe.image_path,
        "cooking_time": recipe.cooking_time,
        "servings": recipe.servings,
        "difficulty": recipe.difficulty,
        "visibility": recipe.visibility,
        "tags": recipe.tags,
        "created_at": recipe.created_at,
        "username": username,
        "full_name": full_name,
        "profile_image": profile_image,
        "like_count": like_count or 0,
        "comment_count": comment_count or 0,
        "is_liked": is_liked,
    }


class FeedService:
    """Read side of the recipe store"""

    async def list_recipes(
        self,
        db: AsyncSession,
        identity: Optional[Identity],
        filters: FeedFilters,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        """Newest-first page of visible recipes, annotated with isLiked"""
        stmt = recipe_query()

        if identity is not None and filters.following:
            # Following feed: authors the caller follows, any visibility
            stmt = stmt.join(Follower, Follower.following_id == Recipe.user_id).where(
                Follower.follower_id == identity.id
            )
        else:
            stmt = stmt.where(visibility_clause(identity))

        stmt = apply_filters(stmt, filters)
        stmt = (
            stmt.order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .offset(offset)
            .limit(limit)
        )

        rows = (await db.execute(stmt)).all()
        if not rows:
            return []

        liked: Set[int] = set()
        if identity is not None:
            liked = await self.liked_recipe_ids(db, identity.id, [row[0].id for row in rows])

        return [serialize_recipe(row, row[0].id in liked) for row in rows]

    async def get_recipe(
        self,
        db: AsyncSession,
        recipe_id: int,
        identity: Optional[Identity] = None,
    ) -> Dict[str, Any]:
        """Single recipe by id; no visibility filter is applied"""
        row = (await db.execute(recipe_query().where(Recipe.id == recipe_id))).first()
        if row is None:
            raise NotFoundError("Recipe not found")

        is_liked = False
        if identity is not None:
            is_liked = await self.has_liked(db, identity.id, recipe_id)

        return serialize_recipe(row, is_liked)

    async def liked_recipe_ids(
        self,
        db: AsyncSession,
        user_id: int,
        recipe_ids: Iterable[int],
    ) -> Set[int]:
        """One batched lookup of which of recipe_ids the user has liked"""
        ids = list(recipe_ids)
        if not ids:
            return set()

        result = await db.execute(
            select(Like.recipe_id).where(Like.user_id == user_id, Like.recipe_id.in_(ids))
        )
        return set(result.scalars().all())

    async def has_liked(self, db: AsyncSession, user_id: int, recipe_id: int) -> bool:
        result = await db.execute(
            select(Like.id).where(Like.user_id == user_id, Like.recipe_id == recipe_id)
        )
        return result.first() is not None


feed_service = FeedService()
