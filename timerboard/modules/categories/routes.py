from fastapi import APIRouter, Depends, HTTPException
from typing import List

from timerboard.core.dependencies import (
    get_identity_store,
    get_permission_guard,
    require_category_permission,
    require_permission,
)
from timerboard.database.identity_store import IdentityStore
from timerboard.modules.categories.schemas import AccessGrantUpdate, CategoryAccessGrant
from timerboard.modules.categories.service import CategoryAccessService
from timerboard.modules.permissions.schemas import Admin, Capability, CategoryView
from timerboard.modules.permissions.service import PermissionGuard
from timerboard.modules.users.schemas import User

router = APIRouter(prefix="/guilds/{guild_id}/categories", tags=["categories"])


def get_category_access_service(store: IdentityStore = Depends(get_identity_store)) -> CategoryAccessService:
    return CategoryAccessService(store)


@router.get("/{category_id}/access", response_model=Capability)
async def get_my_access(
    guild_id: int,
    category_id: int,
    user: User = Depends(require_category_permission(CategoryView)),
    guard: PermissionGuard = Depends(get_permission_guard)
):
    """Effective capability of the current user on the category"""
    return guard.capability_for(user, guild_id, category_id)


@router.get("/{category_id}/access-roles", response_model=List[CategoryAccessGrant])
async def list_access_roles(
    guild_id: int,
    category_id: int,
    user: User = Depends(require_permission(Admin())),
    service: CategoryAccessService = Depends(get_category_access_service)
):
    return service.list_grants(guild_id, category_id)


@router.put("/{category_id}/access-roles/{role_id}", response_model=CategoryAccessGrant)
async def set_access_role(
    guild_id: int,
    category_id: int,
    role_id: int,
    update: AccessGrantUpdate,
    user: User = Depends(require_permission(Admin())),
    service: CategoryAccessService = Depends(get_category_access_service)
):
    """Create or overwrite the grant for a role on the category"""
    return service.set_grant(guild_id, category_id, role_id, update)


@router.delete("/{category_id}/access-roles/{role_id}", status_code=204)
async def delete_access_role(
    guild_id: int,
    category_id: int,
    role_id: int,
    user: User = Depends(require_permission(Admin())),
    service: CategoryAccessService = Depends(get_category_access_service)
):
    if not service.remove_grant(guild_id, category_id, role_id):
        raise HTTPException(status_code=404, detail="Access grant not found")
