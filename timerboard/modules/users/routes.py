from fastapi import APIRouter, Depends
from typing import List

from timerboard.core.dependencies import (
    get_category_enumerator,
    get_identity_store,
    get_service_identity_store,
    require_login,
    require_permission,
)
from timerboard.database.identity_store import IdentityStore
from timerboard.modules.categories.schemas import FleetCategory
from timerboard.modules.permissions.schemas import Admin
from timerboard.modules.permissions.service import CategoryEnumerator
from timerboard.modules.users.schemas import SetAdminRequest, SetAdminResponse, User, UserGuildsResponse
from timerboard.modules.users.service import UserService

router = APIRouter(prefix="/user", tags=["user"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


def get_user_service(store: IdentityStore = Depends(get_identity_store)) -> UserService:
    return UserService(store)


def get_admin_user_service(store: IdentityStore = Depends(get_service_identity_store)) -> UserService:
    return UserService(store)


@router.get("/guilds", response_model=UserGuildsResponse)
async def get_user_guilds(
    user: User = Depends(require_login),
    service: UserService = Depends(get_user_service)
):
    """Guilds the current user is a member of (all guilds for admins)"""
    return service.get_user_guilds(user)


@router.get("/guilds/{guild_id}/manageable-categories", response_model=List[FleetCategory])
async def get_manageable_categories(
    guild_id: int,
    user: User = Depends(require_login),
    enumerator: CategoryEnumerator = Depends(get_category_enumerator)
):
    """Categories in the guild the user can create in or manage"""
    return enumerator.list_manageable(user, guild_id)


@router.get("/guilds/{guild_id}/viewable-category-ids", response_model=List[int])
async def get_viewable_category_ids(
    guild_id: int,
    user: User = Depends(require_login),
    enumerator: CategoryEnumerator = Depends(get_category_enumerator)
):
    return enumerator.viewable_category_ids(user, guild_id)


@router.get("/guilds/{guild_id}/creatable-category-ids", response_model=List[int])
async def get_creatable_category_ids(
    guild_id: int,
    user: User = Depends(require_login),
    enumerator: CategoryEnumerator = Depends(get_category_enumerator)
):
    return enumerator.creatable_category_ids(user, guild_id)


@router.get("/manageable-categories", response_model=List[FleetCategory])
async def get_all_manageable_categories(
    user: User = Depends(require_login),
    enumerator: CategoryEnumerator = Depends(get_category_enumerator)
):
    """Manageable categories across every guild"""
    return enumerator.list_manageable(user, None)


@admin_router.get("/users", response_model=List[User])
async def list_admins(
    user: User = Depends(require_permission(Admin())),
    service: UserService = Depends(get_user_service)
):
    return service.list_admins()


@admin_router.post("/users/{user_id}/admin", response_model=SetAdminResponse)
async def set_admin(
    user_id: int,
    request: SetAdminRequest,
    user: User = Depends(require_permission(Admin())),
    service: UserService = Depends(get_admin_user_service)
):
    """Set admin status for a user (requires current user to be admin)"""
    return service.set_admin(user_id, request.is_admin)
