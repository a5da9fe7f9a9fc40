"""
Receipegram Recipe Models
Recipes and their engagement edges (likes, comments)
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum as PyEnum

from core.database import Base


class Visibility(str, PyEnum):
    """Recipe access scope"""
    PUBLIC = "public"
    FRIENDS = "friends"


class Difficulty(str, PyEnum):
    """Suggested difficulty levels; any text is accepted"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Recipe(Base):
    """Recipe owned by the user who created it"""
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    ingredients = Column(Text, nullable=False)
    instructions = Column(Text, nullable=False)

    # Stored media file names under UPLOAD_DIR
    video_path = Column(String(255))
    image_path = Column(String(255))

    cooking_time = Column(Integer)  # in minutes
    servings = Column(Integer)
    difficulty = Column(String(50), default=Difficulty.MEDIUM.value)
    visibility = Column(String(20), default=Visibility.PUBLIC.value, nullable=False, index=True)
    tags = Column(Text, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="recipes")

    def __repr__(self):
        return f"<Recipe(id={self.id}, title={self.title!r}, visibility={self.visibility})>"


class Like(Base):
    """Like edge; existence is the only state"""
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "recipe_id", name="uq_likes_user_recipe"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Comment(Base):
    """Append-only comment on a recipe"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
