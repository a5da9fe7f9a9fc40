"""
Receipegram Services Module
Core business logic: accounts, feed queries, recipes and the follow graph
"""

from .auth_service import AuthService, AuthenticationError, Identity, auth_service
from .feed_service import FeedService, FeedFilters, feed_service
from .recipe_service import RecipeService, RecipeForm, recipe_service
from .social_service import SocialService, social_service

__all__ = [
    # Accounts
    "AuthService",
    "AuthenticationError",
    "Identity",
    "auth_service",

    # Feed
    "FeedService",
    "FeedFilters",
    "feed_service",

    # Recipes
    "RecipeService",
    "RecipeForm",
    "recipe_service",

    # Social
    "SocialService",
    "social_service",
]
