"""
Receipegram Database Models
Central import module for all database models
"""

from .users import User, Follower
from .recipe_models import Recipe, Like, Comment, Visibility, Difficulty

__all__ = [
    # User models
    "User",
    "Follower",

    # Recipe models
    "Recipe",
    "Like",
    "Comment",

    # Enums
    "Visibility",
    "Difficulty",
]
