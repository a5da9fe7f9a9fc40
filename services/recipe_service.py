"""
Receipegram Recipe Service
Recipe mutations (owner-only), like toggling and comments
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import re

from fastapi import UploadFile
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from core.exceptions import NotFoundError, StorageError, ValidationError
from models.recipe_models import Comment, Difficulty, Like, Recipe, Visibility
from models.users import User
from services.auth_service import Identity
from services.feed_service import feed_service
from services.media_storage import remove_media, save_upload

logger = structlog.get_logger()

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

VISIBILITY_VALUES = {v.value for v in Visibility}


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a form value; zero and junk become None"""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1)) or None


@dataclass
class RecipeForm:
    """Raw text fields of a recipe multipart form"""
    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[str] = None
    instructions: Optional[str] = None
    cooking_time: Optional[str] = None
    servings: Optional[str] = None
    difficulty: Optional[str] = None
    visibility: Optional[str] = None
    tags: Optional[str] = None


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _check_visibility(value: Optional[str]) -> None:
    # Only an absent or empty field falls back to the default
    if value and value not in VISIBILITY_VALUES:
        raise ValidationError("Visibility must be 'public' or 'friends'")


def comment_query():
    """Comment joined with its author's profile fields"""
    return select(Comment, User.username, User.full_name, User.profile_image).join(
        User, Comment.user_id == User.id
    )


def serialize_comment(row: Any) -> Dict[str, Any]:
    comment, username, full_name, profile_image = row
    return {
        "id": comment.id,
        "user_id": comment.user_id,
        "recipe_id": comment.recipe_id,
        "content": comment.content,
        "created_at": comment.created_at,
        "username": username,
        "full_name": full_name,
        "profile_image": profile_image,
    }


class RecipeService:
    """Write side of the recipe store"""

    async def _ensure_recipe(self, db: AsyncSession, recipe_id: int) -> None:
        result = await db.execute(select(Recipe.id).where(Recipe.id == recipe_id))
        if result.first() is None:
            raise NotFoundError("Recipe not found")

    async def _owned_recipe(self, db: AsyncSession, recipe_id: int, user_id: int) -> Recipe:
        result = await db.execute(
            select(Recipe).where(Recipe.id == recipe_id, Recipe.user_id == user_id)
        )
        recipe = result.scalar_one_or_none()
        if recipe is None:
            raise NotFoundError("Recipe not found or access denied")
        return recipe

    async def create_recipe(
        self,
        db: AsyncSession,
        identity: Identity,
        form: RecipeForm,
        video: Optional[UploadFile] = None,
        image: Optional[UploadFile] = None,
    ) -> Dict[str, Any]:
        if not (_present(form.title) and _present(form.ingredients) and _present(form.instructions)):
            raise ValidationError("Title, ingredients, and instructions are required")
        _check_visibility(form.visibility)

        video_path = await save_upload("video", video)
        try:
            image_path = await save_upload("image", image)
        except Exception:
            remove_media(video_path)
            raise

        recipe = Recipe(
            user_id=identity.id,
            title=form.title,
            description=form.description or "",
            ingredients=form.ingredients,
            instructions=form.instructions,
            video_path=video_path,
            image_path=image_path,
            cooking_time=parse_int(form.cooking_time),
            servings=parse_int(form.servings),
            difficulty=form.difficulty or Difficulty.MEDIUM.value,
            visibility=form.visibility or Visibility.PUBLIC.value,
            tags=form.tags or "",
        )
        db.add(recipe)
        try:
            await db.commit()
        except SQLAlchemyError:
            remove_media(video_path, image_path)
            raise

        logger.info("Recipe created", recipe_id=recipe.id, user_id=identity.id, visibility=recipe.visibility)
        return await feed_service.get_recipe(db, recipe.id, identity)

    async def update_recipe(
        self,
        db: AsyncSession,
        identity: Identity,
        recipe_id: int,
        form: RecipeForm,
        video: Optional[UploadFile] = None,
        image: Optional[UploadFile] = None,
    ) -> Dict[str, Any]:
        recipe = await self._owned_recipe(db, recipe_id, identity.id)
        _check_visibility(form.visibility)

        new_video = await save_upload("video", video)
        try:
            new_image = await save_upload("image", image)
        except Exception:
            remove_media(new_video)
            raise

        superseded = []
        if new_video:
            superseded.append(recipe.video_path)
            recipe.video_path = new_video
        if new_image:
            superseded.append(recipe.image_path)
            recipe.image_path = new_image

        # Empty values keep the stored ones, except description and tags
        # which may be cleared explicitly
        if form.title:
            recipe.title = form.title
        if form.description is not None:
            recipe.description = form.description
        if form.ingredients:
            recipe.ingredients = form.ingredients
        if form.instructions:
            recipe.instructions = form.instructions
        if form.cooking_time:
            recipe.cooking_time = parse_int(form.cooking_time)
        if form.servings:
            recipe.servings = parse_int(form.servings)
        if form.difficulty:
            recipe.difficulty = form.difficulty
        if form.visibility:
            recipe.visibility = form.visibility
        if form.tags is not None:
            recipe.tags = form.tags

        try:
            await db.commit()
        except SQLAlchemyError:
            remove_media(new_video, new_image)
            raise

        remove_media(*superseded)
        logger.info("Recipe updated", recipe_id=recipe_id, user_id=identity.id)
        return await feed_service.get_recipe(db, recipe_id, identity)

    async def delete_recipe(self, db: AsyncSession, identity: Identity, recipe_id: int) -> None:
        recipe = await self._owned_recipe(db, recipe_id, identity.id)
        media = (recipe.video_path, recipe.image_path)

        await db.execute(delete(Like).where(Like.recipe_id == recipe_id))
        await db.execute(delete(Comment).where(Comment.recipe_id == recipe_id))
        await db.execute(delete(Recipe).where(Recipe.id == recipe_id))
        await db.commit()

        remove_media(*media)
        logger.info("Recipe deleted", recipe_id=recipe_id, user_id=identity.id)

    async def toggle_like(self, db: AsyncSession, identity: Identity, recipe_id: int) -> bool:
        """Flip the caller's like edge; returns the new isLiked state"""
        await self._ensure_recipe(db, recipe_id)

        if await feed_service.has_liked(db, identity.id, recipe_id):
            await db.execute(
                delete(Like).where(Like.user_id == identity.id, Like.recipe_id == recipe_id)
            )
            liked = False
        else:
            db.add(Like(user_id=identity.id, recipe_id=recipe_id))
            liked = True

        try:
            await db.commit()
        except IntegrityError as e:
            # Concurrent duplicate toggle from the same user
            await db.rollback()
            logger.error("Like toggle conflict", recipe_id=recipe_id, user_id=identity.id, error=str(e))
            raise StorageError("Database error") from e

        logger.info("Like toggled", recipe_id=recipe_id, user_id=identity.id, liked=liked)
        return liked

    async def add_comment(
        self,
        db: AsyncSession,
        identity: Identity,
        recipe_id: int,
        content: Optional[str],
    ) -> Dict[str, Any]:
        text = (content or "").strip()
        if not text:
            raise ValidationError("Comment content is required")

        await self._ensure_recipe(db, recipe_id)

        comment = Comment(user_id=identity.id, recipe_id=recipe_id, content=text)
        db.add(comment)
        await db.commit()

        row = (await db.execute(comment_query().where(Comment.id == comment.id))).one()
        return serialize_comment(row)

    async def list_comments(self, db: AsyncSession, recipe_id: int) -> List[Dict[str, Any]]:
        """Comments on a recipe, newest first"""
        result = await db.execute(
            comment_query()
            .where(Comment.recipe_id == recipe_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return [serialize_comment(row) for row in result.all()]


recipe_service = RecipeService()
