# Import all models to register them with SQLModel
from newsroom.models.user import User, UserCreate, UserPublic, Token
from newsroom.models.category import Category, CategoryCreate, CategoryUpdate, CategoryRead
from newsroom.models.article import (
    Article,
    ArticleStatus,
    ArticleCreate,
    ArticleUpdate,
    ArticleRead,
    ArticleWithRelations,
    ArticlePage,
    Pagination,
    DashboardStats,
)

__all__ = [
    "User",
    "UserCreate",
    "UserPublic",
    "Token",
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryRead",
    "Article",
    "ArticleStatus",
    "ArticleCreate",
    "ArticleUpdate",
    "ArticleRead",
    "ArticleWithRelations",
    "ArticlePage",
    "Pagination",
    "DashboardStats",
]
