from typing import Optional
from datetime import datetime
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from newsroom.models.api import APIModel, utc_now


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    username: str = Field(unique=True, index=True)
    password_hash: str

    # Only administrators can manage categories and articles
    is_admin: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)


class UserCreate(APIModel):
    username: str = PydanticField(min_length=3, max_length=64)
    password: str = PydanticField(min_length=6, max_length=128)


class UserPublic(APIModel):
    id: int
    username: str
    is_admin: bool


class Token(APIModel):
    access_token: str
    token_type: str = "bearer"
