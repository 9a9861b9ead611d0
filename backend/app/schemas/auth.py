import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional


def validate_password_strength(password: str) -> str:
    """
    Password policy
    - at least 8 characters
    - at least one letter and one digit
    """
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Za-z]", password) or not re.search(r"[0-9]", password):
        raise ValueError("Password must contain both letters and numbers")
    return password


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=50)
    role: Literal["buyer", "seller"] = "buyer"

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    message: str
    user_id: Optional[int] = None


class UserInfo(BaseModel):
    id: int
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    store_id: Optional[int] = None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)
    new_password_confirmation: str

    @field_validator("new_password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class UserUpdate(BaseModel):
    role: Optional[Literal["buyer", "seller", "admin", "super_admin"]] = None
    is_active: Optional[bool] = None
