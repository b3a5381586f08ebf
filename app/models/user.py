from datetime import datetime
from typing import Literal

from pydantic import AnyUrl, BaseModel, EmailStr, Field


class User(BaseModel):
    id: str
    firebase_uid: str
    name: str
    email: EmailStr
    picture: AnyUrl | None = None
    role: Literal["student", "instructor"] = Field(
        default="student", description="Instructors see quiz answers; students do not"
    )
    created_at: datetime = Field(default_factory=datetime.today)
    updated_at: datetime = Field(default_factory=datetime.today)


class UserCreate(BaseModel):
    firebase_uid: str
    name: str
    email: EmailStr
    picture: AnyUrl | None = None


class UserSummary(BaseModel):
    """Display fields embedded in certificate lookups."""

    id: str
    name: str | None = None
    email: str | None = None
