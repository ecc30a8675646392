from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    company: str | None = Field(default=None, max_length=200)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    company: str | None = None
    role: str

    model_config = {"from_attributes": True}


class UserProfile(UserOut):
    created_at: datetime


class OrganizationOut(BaseModel):
    id: str
    name: str
    plan: str
    member_role: str


class AuthResponse(BaseModel):
    token: str
    user: UserOut
    message: str | None = None


class ProfileResponse(BaseModel):
    user: UserProfile
    organization: OrganizationOut | None
