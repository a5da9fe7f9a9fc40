"""
Receipegram Recipe Endpoints
Feed listing, recipe CRUD, likes and comments
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from typing import Optional, Tuple

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser, PaginationParams
from schemas.common import MessageResponse
from schemas.recipe_schemas import (
    RecipeListResponse, RecipeDetailResponse, RecipeMutationResponse,
    LikeToggleResponse, CommentCreate, CommentResponse, CommentListResponse
)
from services.feed_service import FeedFilters, feed_service
from services.recipe_service import RecipeForm, recipe_service

router = APIRouter()

# Multipart field name -> RecipeForm attribute
RECIPE_FORM_FIELDS = {
    "title": "title",
    "description": "description",
    "ingredients": "ingredients",
    "instructions": "instructions",
    "cookingTime": "cooking_time",
    "servings": "servings",
    "difficulty": "difficulty",
    "visibility": "visibility",
    "tags": "tags",
}


async def read_recipe_form(
    request: Request,
) -> Tuple[RecipeForm, Optional[UploadFile], Optional[UploadFile]]:
    """
    Read the multipart recipe form

    Text fields keep the difference between absent (None) and empty ("")
    so updates can clear description and tags.
    """
    form = await request.form()

    values = {}
    for field, attr in RECIPE_FORM_FIELDS.items():
        value = form.get(field)
        values[attr] = value if isinstance(value, str) else None

    video = form.get("video")
    image = form.get("image")
    return (
        RecipeForm(**values),
        video if isinstance(video, UploadFile) else None,
        image if isinstance(image, UploadFile) else None,
    )


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    identity: OptionalUser,
    pagination: PaginationParams,
    search: Optional[str] = Query(None, description="Match title, description, ingredients or tags"),
    tags: Optional[str] = Query(None, description="Substring match on tags"),
    difficulty: Optional[str] = Query(None, description="Exact difficulty"),
    user_id: Optional[int] = Query(None, alias="userId", description="Only recipes by this author"),
    following: Optional[str] = Query(None, description="'true' limits the feed to followed authors"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the recipe feed

    Newest first, scoped to what the caller may see and annotated with
    like/comment counts and whether the caller liked each recipe
    """
    filters = FeedFilters(
        search=search,
        tags=tags,
        difficulty=difficulty,
        user_id=user_id,
        following=following == "true",
    )
    recipes = await feed_service.list_recipes(
        db, identity, filters, offset=pagination["offset"], limit=pagination["limit"]
    )
    return {"recipes": recipes}


@router.get("/{recipe_id}", response_model=RecipeDetailResponse)
async def get_recipe(
    recipe_id: int,
    identity: OptionalUser,
    db: AsyncSession = Depends(get_db)
):
    """Get a single recipe"""
    recipe = await feed_service.get_recipe(db, recipe_id, identity)
    return {"recipe": recipe}


@router.post("", response_model=RecipeMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    request: Request,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Create a recipe from a multipart form with optional video and image"""
    form, video, image = await read_recipe_form(request)
    recipe = await recipe_service.create_recipe(db, identity, form, video=video, image=image)
    return {"message": "Recipe created successfully", "recipe": recipe}


@router.put("/{recipe_id}", response_model=RecipeMutationResponse)
async def update_recipe(
    recipe_id: int,
    request: Request,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Update one of the caller's recipes"""
    form, video, image = await read_recipe_form(request)
    recipe = await recipe_service.update_recipe(db, identity, recipe_id, form, video=video, image=image)
    return {"message": "Recipe updated successfully", "recipe": recipe}


@router.delete("/{recipe_id}", response_model=MessageResponse)
async def delete_recipe(
    recipe_id: int,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Delete one of the caller's recipes with its likes and comments"""
    await recipe_service.delete_recipe(db, identity, recipe_id)
    return {"message": "Recipe deleted successfully"}


@router.post("/{recipe_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    recipe_id: int,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Like the recipe, or unlike it if the caller already did"""
    liked = await recipe_service.toggle_like(db, identity, recipe_id)
    return {
        "message": "Recipe liked" if liked else "Recipe unliked",
        "is_liked": liked,
    }


@router.post("/{recipe_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    recipe_id: int,
    comment_data: CommentCreate,
    identity: CurrentUser,
    db: AsyncSession = Depends(get_db)
):
    """Add a comment to a recipe"""
    comment = await recipe_service.add_comment(db, identity, recipe_id, comment_data.content)
    return {"message": "Comment added", "comment": comment}


@router.get("/{recipe_id}/comments", response_model=CommentListResponse)
async def list_comments(
    recipe_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a recipe's comments, newest first"""
    comments = await recipe_service.list_comments(db, recipe_id)
    return {"comments": comments}
