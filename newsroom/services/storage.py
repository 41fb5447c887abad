"""
Data access for users, categories and articles.

Every accessor is a single query (or a single commit) against the session it
was built with. Absence is reported as None/False; malformed input raises
ValidationError. Authorization is the routers' concern, not this layer's.
"""

from dataclasses import dataclass
from typing import List, Optional
from loguru import logger
from sqlalchemy import desc, func, or_
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from newsroom.core.errors import ValidationError
from newsroom.models.article import (
    Article,
    ArticleCreate,
    ArticleStatus,
    ArticleUpdate,
    ArticleWithRelations,
    DashboardStats,
)
from newsroom.models.api import utc_now
from newsroom.models.category import Category, CategoryCreate, CategoryUpdate
from newsroom.models.user import User

# Newest first; id breaks ties between articles published in the same instant
LATEST_FIRST = (desc(Article.published_at), desc(Article.id))

# Columns an update may change but never clear
NON_NULLABLE_ARTICLE_FIELDS = {"title", "slug", "excerpt", "content", "status", "featured", "published_at"}

# Free-text columns that must hold more than whitespace; title and excerpt are stored stripped
TEXT_ARTICLE_FIELDS = ("title", "excerpt", "content")
STRIPPED_ARTICLE_FIELDS = ("title", "excerpt")


@dataclass
class ArticleQuery:
    """Filter and paging options for article listings.

    `status` defaults to published when left unset. `any_status` lifts the
    status filter entirely (admin listings).
    """

    limit: Optional[int] = None
    offset: Optional[int] = None
    category_id: Optional[int] = None
    status: Optional[ArticleStatus] = None
    any_status: bool = False
    featured: Optional[bool] = None


def build_article_filters(query: ArticleQuery) -> list:
    """Predicates shared by the list and count queries for `query`."""
    filters = []
    if query.category_id is not None:
        filters.append(Article.category_id == query.category_id)
    if not query.any_status:
        filters.append(Article.status == (query.status or ArticleStatus.PUBLISHED))
    if query.featured is not None:
        filters.append(Article.featured == query.featured)
    return filters


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DatabaseStorage:
    def __init__(self, session: Session):
        self.session = session

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.username == username)).first()

    def create_user(self, username: str, password_hash: str, is_admin: bool = False) -> User:
        if self.get_user_by_username(username):
            raise ValidationError("Username already exists")
        user = User(username=username, password_hash=password_hash, is_admin=is_admin)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    # Categories

    def get_categories(self) -> List[Category]:
        return list(self.session.exec(select(Category)).all())

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return self.session.exec(select(Category).where(Category.slug == slug)).first()

    def get_category_by_id(self, category_id: int) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def create_category(self, data: CategoryCreate) -> Category:
        name = (data.name or "").strip()
        slug = (data.slug or "").strip()
        if not name or not slug:
            raise ValidationError("Category name and slug are required")
        if self.get_category_by_slug(slug):
            raise ValidationError(f"Slug '{slug}' is already in use")

        category = Category(name=name, slug=slug)
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        logger.info(f"Created category {category.id} ({category.slug})")
        return category

    def update_category(self, category_id: int, data: CategoryUpdate) -> Optional[Category]:
        category = self.get_category_by_id(category_id)
        if not category:
            return None

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None or not str(value).strip():
                raise ValidationError(f"Category {field} cannot be blank")
        if "slug" in changes and changes["slug"] != category.slug:
            if self.get_category_by_slug(changes["slug"]):
                raise ValidationError(f"Slug '{changes['slug']}' is already in use")

        for field, value in changes.items():
            setattr(category, field, value.strip())
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        logger.info(f"Updated category {category.id}")
        return category

    def delete_category(self, category_id: int) -> bool:
        """Remove a category; its articles stay and become uncategorized."""
        category = self.get_category_by_id(category_id)
        if not category:
            return False

        orphans = self.session.exec(select(Article).where(Article.category_id == category_id)).all()
        for article in orphans:
            article.category_id = None
            self.session.add(article)
        self.session.delete(category)
        self.session.commit()
        logger.info(f"Deleted category {category_id}, detached {len(orphans)} article(s)")
        return True

    # Articles

    def get_articles(self, query: Optional[ArticleQuery] = None) -> List[Article]:
        query = query or ArticleQuery()
        statement = select(Article).where(*build_article_filters(query)).order_by(*LATEST_FIRST)
        if query.limit is not None:
            statement = statement.limit(query.limit)
        if query.offset:
            statement = statement.offset(query.offset)
        return list(self.session.exec(statement).all())

    def get_article_count(self, query: Optional[ArticleQuery] = None) -> int:
        query = query or ArticleQuery()
        statement = select(func.count()).select_from(Article).where(*build_article_filters(query))
        return self.session.exec(statement).one() or 0

    def _fetch_with_relations(self, statement) -> List[ArticleWithRelations]:
        statement = statement.options(selectinload(Article.category), selectinload(Article.author))
        return [ArticleWithRelations.model_validate(a) for a in self.session.exec(statement).all()]

    def get_article_by_slug(self, slug: str) -> Optional[ArticleWithRelations]:
        found = self._fetch_with_relations(select(Article).where(Article.slug == slug))
        return found[0] if found else None

    def get_article_by_id(self, article_id: int) -> Optional[ArticleWithRelations]:
        found = self._fetch_with_relations(select(Article).where(Article.id == article_id))
        return found[0] if found else None

    def get_featured_articles(self, limit: int = 5) -> List[ArticleWithRelations]:
        filters = build_article_filters(ArticleQuery(featured=True))
        return self._fetch_with_relations(
            select(Article).where(*filters).order_by(*LATEST_FIRST).limit(limit)
        )

    def get_latest_articles(self, limit: int = 10, category_id: Optional[int] = None) -> List[ArticleWithRelations]:
        filters = build_article_filters(ArticleQuery(category_id=category_id))
        return self._fetch_with_relations(
            select(Article).where(*filters).order_by(*LATEST_FIRST).limit(limit)
        )

    def search_articles(self, query: str, limit: int = 10) -> List[ArticleWithRelations]:
        term = (query or "").strip()
        if not term:
            raise ValidationError("Search query is required")
        pattern = _like_pattern(term)
        statement = (
            select(Article)
            .where(
                Article.status == ArticleStatus.PUBLISHED,
                or_(
                    Article.title.ilike(pattern, escape="\\"),
                    Article.content.ilike(pattern, escape="\\"),
                ),
            )
            .order_by(*LATEST_FIRST)
            .limit(limit)
        )
        return self._fetch_with_relations(statement)

    def _check_article_slug(self, slug: str, article_id: Optional[int] = None):
        statement = select(Article).where(Article.slug == slug)
        if article_id is not None:
            statement = statement.where(Article.id != article_id)
        if self.session.exec(statement).first():
            raise ValidationError(f"Slug '{slug}' is already in use")

    def _check_category(self, category_id: Optional[int]):
        if category_id is not None and not self.get_category_by_id(category_id):
            raise ValidationError(f"Category {category_id} does not exist")

    def _clean_article_text(self, values: dict):
        for field in TEXT_ARTICLE_FIELDS:
            if field in values and not values[field].strip():
                raise ValidationError(f"Article {field} cannot be blank")
        for field in STRIPPED_ARTICLE_FIELDS:
            if field in values:
                values[field] = values[field].strip()

    def create_article(self, data: ArticleCreate, author_id: int) -> Article:
        self._check_article_slug(data.slug)
        self._check_category(data.category_id)

        values = data.model_dump()
        self._clean_article_text(values)
        if values.get("published_at") is None:
            values.pop("published_at", None)
        article = Article(**values, author_id=author_id)
        self.session.add(article)
        self.session.commit()
        self.session.refresh(article)
        logger.info(f"Created article {article.id} ({article.slug}) by user {author_id}")
        return article

    def update_article(self, article_id: int, data: ArticleUpdate) -> Optional[Article]:
        article = self.session.get(Article, article_id)
        if not article:
            return None

        changes = data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_ARTICLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"Article {field} cannot be null")
        self._clean_article_text(changes)
        if "slug" in changes and changes["slug"] != article.slug:
            self._check_article_slug(changes["slug"], article_id)
        if "category_id" in changes:
            self._check_category(changes["category_id"])

        for field, value in changes.items():
            setattr(article, field, value)
        article.updated_at = utc_now()
        self.session.add(article)
        self.session.commit()
        self.session.refresh(article)
        logger.info(f"Updated article {article.id}")
        return article

    def delete_article(self, article_id: int) -> bool:
        article = self.session.get(Article, article_id)
        if not article:
            return False
        self.session.delete(article)
        self.session.commit()
        logger.info(f"Deleted article {article_id}")
        return True

    # Dashboard

    def get_stats(self) -> DashboardStats:
        def count_articles(**options) -> int:
            return self.get_article_count(ArticleQuery(**options))

        return DashboardStats(
            total_articles=count_articles(any_status=True),
            published_articles=count_articles(status=ArticleStatus.PUBLISHED),
            draft_articles=count_articles(status=ArticleStatus.DRAFT),
            scheduled_articles=count_articles(status=ArticleStatus.SCHEDULED),
            featured_articles=count_articles(any_status=True, featured=True),
            total_categories=self.session.exec(select(func.count()).select_from(Category)).one() or 0,
            total_users=self.session.exec(select(func.count()).select_from(User)).one() or 0,
        )
