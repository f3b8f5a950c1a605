"""
PlaceShare Backend: User Schemas
================================

What:  Pydantic models for signup, login and the public user listing.
       The password hash never appears in any response model.
"""

import uuid
from typing import List

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 6


class UserSignup(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserLogin(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    """Returned by signup and login; the frontend stores all three values."""

    userId: uuid.UUID
    email: str
    token: str


class UserOut(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    image: str
    places: List[uuid.UUID]

    @classmethod
    def from_model(cls, user) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            image=user.image_path,
            places=user.place_ids,
        )


class UserListResponse(BaseModel):
    users: List[UserOut]
