"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Request
from supabase import Client
from typing import Any, Dict, Type
import logging

from timerboard.database.identity_store import IdentityStore
from timerboard.database.supabase_client import SupabaseClient, get_supabase
from timerboard.modules.permissions.schemas import CategoryPermission, Permission
from timerboard.modules.permissions.service import CategoryEnumerator, PermissionGuard
from timerboard.modules.users.schemas import User

logger = logging.getLogger(__name__)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (role ids per user and guild)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_identity_store(supabase: Client = Depends(get_supabase)) -> IdentityStore:
    return IdentityStore(supabase)


def get_service_identity_store() -> IdentityStore:
    """Store backed by the service_role client, for admin flag changes."""
    return IdentityStore(SupabaseClient.get_service_client())


def get_permission_guard(
    request: Request,
    store: IdentityStore = Depends(get_identity_store)
) -> PermissionGuard:
    return PermissionGuard(store, _get_request_cache(request))


def get_category_enumerator(
    request: Request,
    store: IdentityStore = Depends(get_identity_store)
) -> CategoryEnumerator:
    return CategoryEnumerator(store, _get_request_cache(request))


def require_login(
    request: Request,
    guard: PermissionGuard = Depends(get_permission_guard)
) -> User:
    """Dependency that only requires an authenticated, known user"""
    return guard.require(request.session, [])


def require_permission(*permissions: Permission):
    """Factory function to create a dependency checking fixed permissions"""
    def check_permission(
        request: Request,
        guard: PermissionGuard = Depends(get_permission_guard)
    ) -> User:
        return guard.require(request.session, list(permissions))
    return check_permission


def require_category_permission(permission_cls: Type[CategoryPermission]):
    """Factory for category checks; guild_id and category_id come from the route path"""
    def check_category_permission(
        guild_id: int,
        category_id: int,
        request: Request,
        guard: PermissionGuard = Depends(get_permission_guard)
    ) -> User:
        permission = permission_cls(guild_id=guild_id, category_id=category_id)
        return guard.require(request.session, [permission])
    return check_category_permission
