# rutacafe/models/user.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from rutacafe.models.common import Role


class UserRegister(BaseModel):
    name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    second_last_name: Optional[str] = None
    email: EmailStr
    phone: str = Field(min_length=1)
    password: str = Field(min_length=6)
    photo: Optional[str] = None
    city_id: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    second_last_name: Optional[str] = None
    phone: Optional[str] = None
    photo: Optional[str] = None
    city_id: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class RoleUpdate(BaseModel):
    role: Role
