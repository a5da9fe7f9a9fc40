"""
Receipegram Recipe Schemas
Feed items, recipe mutations, likes and comments
"""

from datetime import datetime
from typing import List, Optional

from schemas.common import CamelModel


class RecipeOut(CamelModel):
    """Recipe joined with its author and derived engagement counts"""
    id: int
    user_id: int
    title: str
    description: Optional[str] = ""
    ingredients: str
    instructions: str
    video_path: Optional[str] = None
    image_path: Optional[str] = None
    cooking_time: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    visibility: str
    tags: Optional[str] = ""
    created_at: Optional[datetime] = None

    # Author
    username: str
    full_name: Optional[str] = ""
    profile_image: Optional[str] = None

    # Engagement
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False


class RecipeListResponse(CamelModel):
    recipes: List[RecipeOut]


class RecipeDetailResponse(CamelModel):
    recipe: RecipeOut


class RecipeMutationResponse(CamelModel):
    """Schema for create/update responses"""
    message: str
    recipe: RecipeOut


class LikeToggleResponse(CamelModel):
    message: str
    is_liked: bool


class CommentCreate(CamelModel):
    """Schema for a new comment; emptiness is checked after trimming"""
    content: Optional[str] = None


class CommentOut(CamelModel):
    """Comment joined with its author's profile fields"""
    id: int
    user_id: int
    recipe_id: int
    content: str
    created_at: Optional[datetime] = None
    username: str
    full_name: Optional[str] = ""
    profile_image: Optional[str] = None


class CommentResponse(CamelModel):
    message: str
    comment: CommentOut


class CommentListResponse(CamelModel):
    comments: List[CommentOut]
