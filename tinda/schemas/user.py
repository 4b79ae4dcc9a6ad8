from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, ConfigDict, Field

from tinda.schemas.location import Location


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    # admins are seeded, never self-registered
    role: Literal["USER", "SELLER"] = "USER"
    region: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None


class UserLogin(UserBase):
    password: str


class UserRead(UserBase):
    id: int
    name: str
    role: str
    is_verified: bool
    avatar: Optional[str] = None
    joined_at: datetime
    location: Location

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_user(cls, user) -> "UserRead":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            is_verified=user.is_verified,
            avatar=user.avatar,
            joined_at=user.joined_at,
            location=Location.model_validate(user),
        )


class UserSummary(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
