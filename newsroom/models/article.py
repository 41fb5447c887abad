from typing import TYPE_CHECKING, List, Optional
from datetime import datetime
from enum import Enum
from pydantic import Field as PydanticField, field_validator
from sqlmodel import Field, SQLModel, Column, Relationship
from sqlalchemy import Text

from newsroom.models.api import APIModel, SLUG_PATTERN, as_utc, utc_now
from newsroom.models.category import CategoryRead
from newsroom.models.user import UserPublic

if TYPE_CHECKING:
    from newsroom.models.category import Category
    from newsroom.models.user import User

EXCERPT_MAX_LENGTH = 300

# Fixed paths under /api/articles that would shadow an article slug
RESERVED_SLUGS = {"featured", "latest", "search"}


class ArticleStatus(str, Enum):
    DRAFT = "draft"  # Unpublished, admin-only
    PUBLISHED = "published"  # Publicly visible
    SCHEDULED = "scheduled"  # Future-dated, admin-only


class Article(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    # Content
    title: str = Field(index=True)
    slug: str = Field(unique=True, index=True)  # URL-friendly title
    excerpt: str = Field(max_length=EXCERPT_MAX_LENGTH)  # Short summary for listings
    content: str = Field(sa_column=Column(Text, nullable=False))  # Rich HTML
    image_url: Optional[str] = None

    # Relations. A missing category renders as "Uncategorized".
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    author_id: int = Field(foreign_key="user.id", index=True)  # Always the creating admin

    # Status
    status: ArticleStatus = Field(default=ArticleStatus.DRAFT, index=True)
    featured: bool = Field(default=False)

    # Timestamps
    published_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    category: Optional["Category"] = Relationship()
    author: Optional["User"] = Relationship()


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_slug(value):
    if value in RESERVED_SLUGS:
        raise ValueError(f"Slug '{value}' is reserved")
    return value


class ArticleCreate(APIModel):
    title: str = PydanticField(min_length=1, max_length=255)
    slug: str = PydanticField(min_length=1, max_length=255, pattern=SLUG_PATTERN)
    excerpt: str = PydanticField(min_length=1, max_length=EXCERPT_MAX_LENGTH)
    content: str = PydanticField(min_length=1)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    status: ArticleStatus = ArticleStatus.DRAFT
    featured: bool = False
    published_at: Optional[datetime] = None

    @field_validator("image_url", mode="before")
    @classmethod
    def empty_image_url(cls, value):
        return _blank_to_none(value)

    @field_validator("slug")
    @classmethod
    def slug_not_reserved(cls, value):
        return _check_slug(value)

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, value):
        return as_utc(value)


class ArticleUpdate(APIModel):
    title: Optional[str] = PydanticField(default=None, min_length=1, max_length=255)
    slug: Optional[str] = PydanticField(default=None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    excerpt: Optional[str] = PydanticField(default=None, min_length=1, max_length=EXCERPT_MAX_LENGTH)
    content: Optional[str] = PydanticField(default=None, min_length=1)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    status: Optional[ArticleStatus] = None
    featured: Optional[bool] = None
    published_at: Optional[datetime] = None

    @field_validator("image_url", mode="before")
    @classmethod
    def empty_image_url(cls, value):
        return _blank_to_none(value)

    @field_validator("slug")
    @classmethod
    def slug_not_reserved(cls, value):
        return _check_slug(value)

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, value):
        return as_utc(value)


class ArticleRead(APIModel):
    id: int
    title: str
    slug: str
    excerpt: str
    content: str
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    author_id: int
    status: ArticleStatus
    featured: bool
    published_at: datetime
    updated_at: datetime


class ArticleWithRelations(ArticleRead):
    category: Optional[CategoryRead] = None
    author: Optional[UserPublic] = None


class Pagination(APIModel):
    total: int
    limit: Optional[int] = None
    offset: int = 0


class ArticlePage(APIModel):
    articles: List[ArticleRead]
    pagination: Pagination


class DashboardStats(APIModel):
    total_articles: int
    published_articles: int
    draft_articles: int
    scheduled_articles: int
    featured_articles: int
    total_categories: int
    total_users: int
