from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class SignUpIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field("", max_length=80)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class SignInIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=80)
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserOut(BaseModel):
    id: str
    email: str
    created_at: datetime


class ProfileOut(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None
    created_at: datetime


class SessionOut(BaseModel):
    authenticated: bool
    user: Optional[UserOut] = None
    profile: Optional[ProfileOut] = None


class AuthOut(SessionOut):
    access_token: str
    expires_at: datetime
