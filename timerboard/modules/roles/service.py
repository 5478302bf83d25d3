from typing import Any, Dict, FrozenSet, List, Optional
import logging

from timerboard.database.identity_store import IdentityStore

logger = logging.getLogger(__name__)


class RoleMembershipIndex:
    """
    Which Discord roles a user holds inside a guild.

    Memberships are synced from Discord by an external feed; this index only
    reads them. An optional request-scoped cache avoids repeating the lookup
    when one request checks several permissions on the same guild.
    """

    def __init__(self, store: IdentityStore, cache: Optional[Dict[str, Any]] = None):
        self.store = store
        self.cache = cache

    def roles_for(self, user_id: int, guild_id: int) -> FrozenSet[int]:
        """Role ids the user holds in guild_id. Empty when the user has none there."""
        cache_key = f"role_ids:{user_id}:{guild_id}"
        if self.cache is not None and cache_key in self.cache:
            return self.cache[cache_key]

        member_role_ids = self.store.get_member_role_ids(user_id)
        if not member_role_ids:
            role_ids = frozenset()
        else:
            role_ids = frozenset(self.store.get_guild_role_ids(guild_id, member_role_ids))

        if self.cache is not None:
            self.cache[cache_key] = role_ids
        return role_ids

    def guilds_for(self, user_id: int) -> List[int]:
        """Guild ids in which the user holds at least one role"""
        member_role_ids = self.store.get_member_role_ids(user_id)
        return self.store.get_role_guild_ids(member_role_ids)
