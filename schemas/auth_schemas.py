"""
Receipegram Authentication Schemas
Pydantic models for authentication requests and responses
"""

from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field

from schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for user registration; presence is checked by the service"""
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, max_length=128)
    full_name: Optional[str] = Field(None, max_length=200)


class UserLogin(CamelModel):
    """Schema for user login; username may also be an email address"""
    username: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(CamelModel):
    """Schema for user profile updates"""
    full_name: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=500)


class User(CamelModel):
    """Schema for the authenticated user's own profile"""
    id: int
    username: str
    email: str
    full_name: Optional[str] = ""
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    """Schema for register/login response"""
    message: str
    token: str
    user: User


class ProfileResponse(CamelModel):
    user: User


class ProfileUpdateResponse(CamelModel):
    message: str
    user: User
