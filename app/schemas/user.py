"""
app/schemas/user.py

Purpose: Request bodies for the user routes

- Login and registration credentials
- Review submissions
- Profile image updates (extra image fields are accepted)
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional

from app.core.security import MAX_PASSWORD_BYTES


class LoginRequest(BaseModel):
    """
    Email is normalized the same way as at registration so the lookup key matches.
    """
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    """
    New account payload.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        """bcrypt rejects passwords longer than 72 bytes."""
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class ReviewRequest(BaseModel):
    rating: float = Field(..., ge=0)
    review: str


class ImageUpdateRequest(BaseModel):
    """
    Profile image fields to merge into the user.
    Any other supplied field is merged as well, except protected ones.
    """
    model_config = ConfigDict(extra="allow")

    image_id: Optional[str] = None
    image_url: Optional[str] = None
