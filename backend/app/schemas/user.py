"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from app.models.user import UserRole


class UserBase(BaseModel):
    """Base user schema."""
    name: str
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    role: UserRole = UserRole.DRIVER


class UserCreate(UserBase):
    """Schema for user creation."""
    pass


class UserUpdate(BaseModel):
    """Schema for user update."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None


class UserResponse(UserBase):
    """Schema for user response."""
    id: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
