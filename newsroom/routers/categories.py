from typing import List
from fastapi import APIRouter, Depends, Response, status

from newsroom.core.errors import NotFoundError
from newsroom.models.category import CategoryCreate, CategoryRead, CategoryUpdate
from newsroom.models.user import User
from newsroom.routers.auth import get_storage, require_admin
from newsroom.services.storage import DatabaseStorage

router = APIRouter()


@router.get("", response_model=List[CategoryRead])
def read_categories(storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_categories()

@router.get("/{slug}", response_model=CategoryRead)
def read_category(slug: str, storage: DatabaseStorage = Depends(get_storage)):
    category = storage.get_category_by_slug(slug)
    if not category:
        raise NotFoundError("Category not found")
    return category

@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    return storage.create_category(category_in)

@router.put("/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    category = storage.update_category(category_id, category_in)
    if not category:
        raise NotFoundError("Category not found")
    return category

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    """Delete a category. Its articles are kept and become uncategorized."""
    storage.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
