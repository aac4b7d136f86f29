import uuid

from pydantic import BaseModel, EmailStr, Field


class UserDetailsResponse(BaseModel):
    """Schema for returning user details."""

    id: uuid.UUID = Field(..., description="User id")
    email: EmailStr = Field(..., description="User email")

    model_config = {"from_attributes": True}


class UserRegisterRequest(BaseModel):
    """Schema for user registration."""

    email: EmailStr = Field(..., description="Email address for the new account")
    password: str = Field(..., min_length=8, description="Password (min 8 characters)")


class UserLoginRequest(BaseModel):
    """Schema for password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class Token(BaseModel):
    access_token: str
    token_type: str
    expires_in: int
