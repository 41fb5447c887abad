from fastapi import APIRouter, Depends

from newsroom.models.article import DashboardStats
from newsroom.models.user import User
from newsroom.routers.auth import get_storage, require_admin
from newsroom.services.storage import DatabaseStorage

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    admin: User = Depends(require_admin),
    storage: DatabaseStorage = Depends(get_storage),
):
    """Counters for the admin dashboard."""
    return storage.get_stats()
