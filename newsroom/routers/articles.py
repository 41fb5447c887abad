from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from loguru import logger

from newsroom.core.config import settings
from newsroom.core.errors import AuthorizationError, NotFoundError, ValidationError
from newsroom.models.article import (
    ArticleCreate,
    ArticlePage,
    ArticleRead,
    ArticleStatus,
    ArticleUpdate,
    ArticleWithRelations,
    Pagination,
)
from newsroom.models.user import User
from newsroom.routers.auth import get_current_user_optional, get_storage, is_admin, require_admin
from newsroom.services.storage import ArticleQuery, DatabaseStorage

router = APIRouter()

# Extra status filter value: every status at once (admin listings)
ALL_STATUSES = "all"
STATUS_FILTERS = {s.value for s in ArticleStatus} | {ALL_STATUSES}


def _parse_status_filter(raw: Optional[str]) -> Optional[str]:
    value = (raw or "").strip().lower()
    if not value:
        return None
    if value not in STATUS_FILTERS:
        raise ValidationError(f"Invalid status '{raw}', expected one of: {', '.join(sorted(STATUS_FILTERS))}")
    return value


@router.get("", response_model=ArticlePage)
def read_articles(
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    category_id: Optional[int] = Query(default=None, alias="categoryId"),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    storage: DatabaseStorage = Depends(get_storage),
):
    """Paginated article listing. Non-published statuses are admin-only."""
    status_value = _parse_status_filter(status_filter)
    if status_value and status_value != ArticleStatus.PUBLISHED.value and not is_admin(current_user):
        raise AuthorizationError("Not authorized to access non-published articles")

    query = ArticleQuery(
        limit=limit,
        offset=offset,
        category_id=category_id,
        status=ArticleStatus(status_value) if status_value and status_value != ALL_STATUSES else None,
        any_status=status_value == ALL_STATUSES,
    )
    articles = storage.get_articles(query)
    total = storage.get_article_count(query)

    return ArticlePage(
        articles=[ArticleRead.model_validate(a) for a in articles],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )

@router.get("/featured", response_model=List[ArticleWithRelations])
def read_featured_articles(
    limit: int = Query(default=5, ge=1, le=settings.MAX_PAGE_SIZE),
    storage: DatabaseStorage = Depends(get_storage),
):
    return storage.get_featured_articles(limit)

@router.get("/latest", response_model=List[ArticleWithRelations])
def read_latest_articles(
    limit: int = Query(default=10, ge=1, le=settings.MAX_PAGE_SIZE),
    category_id: Optional[int] = Query(default=None, alias="categoryId"),
    storage: DatabaseStorage = Depends(get_storage),
):
    return storage.get_latest_articles(limit, category_id)

@router.get("/search", response_model=List[ArticleWithRelations])
def search_articles(
    q: Optional[str] = None,
    limit: int = Query(default=10, ge=1, le=settings.MAX_PAGE_SIZE),
    storage: DatabaseStorage = Depends(get_storage),
):
    if not q or not q.strip():
        raise ValidationError("Search query is required")
    return storage.search_articles(q, limit)

@router.get("/id/{article_id}", response_model=ArticleWithRelations)
def read_article_by_id(
    article_id: int,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    """Fetch any article by id, whatever its status. Used by the editor."""
    article = storage.get_article_by_id(article_id)
    if not article:
        raise NotFoundError("Article not found")
    return article

@router.get("/{slug}", response_model=ArticleWithRelations)
def read_article(
    slug: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    storage: DatabaseStorage = Depends(get_storage),
):
    article = storage.get_article_by_slug(slug)
    if not article:
        raise NotFoundError("Article not found")
    if article.status != ArticleStatus.PUBLISHED and not is_admin(current_user):
        logger.warning(f"Blocked access to {article.status.value} article '{slug}'")
        raise AuthorizationError("Not authorized to access this article")
    return article

@router.post("", response_model=ArticleRead, status_code=status.HTTP_201_CREATED)
def create_article(
    article_in: ArticleCreate,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    # The author is always the authenticated admin, never the request body
    return storage.create_article(article_in, author_id=admin.id)

@router.put("/{article_id}", response_model=ArticleRead)
def update_article(
    article_id: int,
    article_in: ArticleUpdate,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    article = storage.update_article(article_id, article_in)
    if not article:
        raise NotFoundError("Article not found")
    return article

@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(
    article_id: int,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    storage.delete_article(article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
