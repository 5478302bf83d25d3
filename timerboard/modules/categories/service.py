from fastapi import HTTPException
from typing import AbstractSet, Dict, Iterable, List
import logging

from timerboard.database.identity_store import IdentityStore
from timerboard.modules.categories.schemas import AccessGrantUpdate, CategoryAccessGrant, FleetCategory
from timerboard.modules.permissions.schemas import Capability

logger = logging.getLogger(__name__)


def fold_grants(grants: Iterable[CategoryAccessGrant], role_ids: AbstractSet[int]) -> Capability:
    """OR together the grants held by role_ids. Grants for other roles are ignored."""
    return Capability.union(grant for grant in grants if grant.role_id in role_ids)


def fold_grants_by_category(
    grants: Iterable[CategoryAccessGrant],
    role_ids: AbstractSet[int]
) -> Dict[int, Capability]:
    """Per-category effective capability for a batch of grants"""
    by_category: Dict[int, List[CategoryAccessGrant]] = {}
    for grant in grants:
        if grant.role_id in role_ids:
            by_category.setdefault(grant.category_id, []).append(grant)
    return {
        category_id: Capability.union(category_grants)
        for category_id, category_grants in by_category.items()
    }


class CategoryAccessResolver:
    def __init__(self, store: IdentityStore):
        self.store = store

    def effective_capability(self, category_id: int, role_ids: AbstractSet[int]) -> Capability:
        """Union of every grant on category_id held by one of role_ids"""
        if not role_ids:
            return Capability.none()
        grants = self.store.get_grants(category_id, role_ids)
        return fold_grants(grants, role_ids)

    def effective_capabilities(
        self,
        category_ids: Iterable[int],
        role_ids: AbstractSet[int]
    ) -> Dict[int, Capability]:
        """Effective capability for many categories with a single grant query"""
        category_ids = list(category_ids)
        capabilities = {category_id: Capability.none() for category_id in category_ids}
        if not role_ids or not category_ids:
            return capabilities
        grants = self.store.get_grants_for_categories(category_ids, role_ids)
        capabilities.update(fold_grants_by_category(grants, role_ids))
        return capabilities


class CategoryAccessService:
    """Admin-side administration of access grants"""

    def __init__(self, store: IdentityStore):
        self.store = store

    def get_category_in_guild(self, guild_id: int, category_id: int) -> FleetCategory:
        category = self.store.get_category(category_id)
        if category is None or category.guild_id != guild_id:
            raise HTTPException(status_code=404, detail="Category not found")
        return category

    def list_grants(self, guild_id: int, category_id: int) -> List[CategoryAccessGrant]:
        self.get_category_in_guild(guild_id, category_id)
        return self.store.get_grants_by_category(category_id)

    def set_grant(
        self,
        guild_id: int,
        category_id: int,
        role_id: int,
        update: AccessGrantUpdate
    ) -> CategoryAccessGrant:
        """Create or overwrite the grant for (category, role)"""
        self.get_category_in_guild(guild_id, category_id)
        if not self.store.get_guild_role_ids(guild_id, [role_id]):
            raise HTTPException(status_code=404, detail="Role not found in guild")
        grant = CategoryAccessGrant(
            category_id=category_id,
            role_id=role_id,
            can_view=update.can_view,
            can_create=update.can_create,
            can_manage=update.can_manage,
        )
        logger.info(
            "Setting access grant on category %s for role %s: view=%s create=%s manage=%s",
            category_id, role_id, grant.can_view, grant.can_create, grant.can_manage
        )
        return self.store.upsert_grant(grant)

    def remove_grant(self, guild_id: int, category_id: int, role_id: int) -> bool:
        self.get_category_in_guild(guild_id, category_id)
        return self.store.delete_grant(category_id, role_id)
