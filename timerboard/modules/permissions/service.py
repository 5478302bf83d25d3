"""
Permission resolution for guild-scoped fleet categories.

A user's effective capability on a category is the OR-union of the grants
held by every role they have in the category's guild. Admins bypass every
per-category check.
"""

from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence
import logging

from timerboard.config import settings
from timerboard.database.identity_store import IdentityStore
from timerboard.modules.auth.errors import AccessDenied
from timerboard.modules.auth.session import SessionResolver
from timerboard.modules.categories.schemas import FleetCategory
from timerboard.modules.categories.service import CategoryAccessResolver
from timerboard.modules.permissions.schemas import (
    Admin, Capability, CategoryPermission, Permission
)
from timerboard.modules.roles.service import RoleMembershipIndex
from timerboard.modules.users.schemas import User

logger = logging.getLogger(__name__)


class PermissionGuard:
    def __init__(self, store: IdentityStore, cache: Optional[Dict[str, Any]] = None):
        self.store = store
        self.session_resolver = SessionResolver(store)
        self.role_index = RoleMembershipIndex(store, cache)
        self.access_resolver = CategoryAccessResolver(store)

    def require(
        self,
        session: MutableMapping[str, Any],
        permissions: Sequence[Permission] = ()
    ) -> User:
        """
        Resolve the session user and check every permission in order.

        An empty list only requires a logged-in user. The first failing
        permission raises AccessDenied; session failures raise before any
        permission is looked at. Returns the full user record on success.
        """
        user = self.session_resolver.resolve(session)
        if user.is_admin:
            return user
        for permission in permissions:
            self.check(user, permission)
        return user

    def check(self, user: User, permission: Permission) -> None:
        if user.is_admin:
            return
        if isinstance(permission, Admin):
            self._deny(user, permission.describe())
        elif isinstance(permission, CategoryPermission):
            capability = self.capability_for(user, permission.guild_id, permission.category_id)
            if not capability.allows(permission.capability):
                self._deny(user, permission.describe())
        else:
            raise TypeError(f"Unknown permission {permission!r}")

    def capability_for(self, user: User, guild_id: int, category_id: int) -> Capability:
        """Effective capability of user on a category, full for admins"""
        if user.is_admin:
            return Capability.full()
        role_ids = self.role_index.roles_for(user.id, guild_id)
        return self.access_resolver.effective_capability(category_id, role_ids)

    def _deny(self, user: User, reason: str) -> None:
        logger.info("Access denied for user %s: %s", user.id, reason)
        raise AccessDenied(user.id, reason)


class CategoryEnumerator:
    """Lists the categories in a guild (or everywhere) that a user can act on."""

    def __init__(self, store: IdentityStore, cache: Optional[Dict[str, Any]] = None):
        self.store = store
        self.role_index = RoleMembershipIndex(store, cache)
        self.access_resolver = CategoryAccessResolver(store)

    def manageable_categories(self, user: User, guild_id: Optional[int] = None) -> List[int]:
        """Ids of categories where the user can create or manage. guild_id=None spans all guilds."""
        return [c.id for c in self.list_manageable(user, guild_id)]

    def viewable_category_ids(self, user: User, guild_id: Optional[int] = None) -> List[int]:
        return [c.id for c in self._filter(user, guild_id, lambda cap: cap.can_view)]

    def creatable_category_ids(self, user: User, guild_id: Optional[int] = None) -> List[int]:
        return [c.id for c in self._filter(user, guild_id, lambda cap: cap.can_create)]

    def list_manageable(self, user: User, guild_id: Optional[int] = None) -> List[FleetCategory]:
        """Manageable category records, ordered by name then id"""
        return self._filter(user, guild_id, lambda cap: cap.is_manageable)

    def _filter(
        self,
        user: User,
        guild_id: Optional[int],
        predicate: Callable[[Capability], bool]
    ) -> List[FleetCategory]:
        if user.is_admin:
            if guild_id is None:
                categories = self.store.get_all_categories(limit=settings.admin_category_page_size)
            else:
                categories = self.store.get_categories_by_guild(
                    guild_id, limit=settings.admin_category_page_size
                )
            return _ordered(categories)

        guild_ids = [guild_id] if guild_id is not None else self.role_index.guilds_for(user.id)
        selected: List[FleetCategory] = []
        for gid in guild_ids:
            role_ids = self.role_index.roles_for(user.id, gid)
            if not role_ids:
                continue
            categories = self.store.get_categories_by_guild(gid)
            capabilities = self.access_resolver.effective_capabilities(
                [c.id for c in categories], role_ids
            )
            selected.extend(c for c in categories if predicate(capabilities[c.id]))
        return _ordered(selected)


def _ordered(categories: List[FleetCategory]) -> List[FleetCategory]:
    return sorted(categories, key=lambda c: (c.name, c.id))
