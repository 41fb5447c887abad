from typing import Optional
from datetime import datetime
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from newsroom.models.api import APIModel, SLUG_PATTERN, utc_now


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(unique=True, index=True)  # e.g. "politics"
    created_at: datetime = Field(default_factory=utc_now)


class CategoryCreate(APIModel):
    name: str = PydanticField(min_length=1, max_length=100)
    slug: str = PydanticField(min_length=1, max_length=100, pattern=SLUG_PATTERN)


class CategoryUpdate(APIModel):
    name: Optional[str] = PydanticField(default=None, min_length=1, max_length=100)
    slug: Optional[str] = PydanticField(default=None, min_length=1, max_length=100, pattern=SLUG_PATTERN)


class CategoryRead(APIModel):
    id: int
    name: str
    slug: str
