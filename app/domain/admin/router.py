"""Admin router - user management, dashboard stats and subscriptions"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin, require_super_admin
from ...database import get_db
from ...models import Profile
from .schemas import (
    AdminUserResponse,
    RoleUpdateRequest,
    SubscriptionUpdateRequest,
    SubscriptionUserResponse,
)
from .service import AdminService

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    return AdminService(db)


# ============================================================================
# USERS
# ============================================================================


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_users()


@router.get("/users/search", response_model=list[AdminUserResponse])
async def search_users(
    q: str = Query("", max_length=255),
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_users(q.strip() or None)


@router.get("/users/{user_id}/activity")
async def get_user_activity(
    user_id: str,
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.get_user_activity(user_id)


@router.put("/users/{user_id}/role", response_model=AdminUserResponse)
async def update_user_role(
    user_id: str,
    body: RoleUpdateRequest,
    admin: Profile = Depends(require_super_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.update_role(user_id, body.role, admin)


@router.get("/stats")
async def get_stats(
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.get_stats()


# ============================================================================
# SUBSCRIPTIONS
# ============================================================================


@router.get("/subscriptions", response_model=list[SubscriptionUserResponse])
async def list_subscriptions(
    q: Optional[str] = Query(None, max_length=255),
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.list_subscriptions((q or "").strip() or None)


@router.get("/subscriptions/stats")
async def get_subscription_stats(
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.get_subscription_stats()


@router.put("/subscriptions/{user_id}", response_model=SubscriptionUserResponse)
async def update_subscription(
    user_id: str,
    body: SubscriptionUpdateRequest,
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return service.update_subscription(user_id, body.plan, admin)
