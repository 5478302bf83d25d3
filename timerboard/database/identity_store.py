"""
Read-mostly lookups against the Supabase tables the permission engine depends on.

No business logic lives here. Store errors (postgrest.APIError, network
failures) are not caught; they propagate to the caller as infrastructure errors.
"""

from supabase import Client
from typing import Iterable, List, Optional
import logging

from timerboard.modules.categories.schemas import CategoryAccessGrant, FleetCategory
from timerboard.modules.users.schemas import User

logger = logging.getLogger(__name__)

GRANT_COLUMNS = "category_id, role_id, can_view, can_create, can_manage"


class IdentityStore:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by Discord id, None when no row exists"""
        result = self.supabase.table("users")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return User(**result.data[0])

    def upsert_user(self, user_id: int, name: Optional[str], grant_admin: bool = False) -> User:
        """Create the user on first login, refresh the name otherwise.

        is_admin is only written when granting; an existing admin flag is never cleared here.
        """
        payload = {"id": user_id, "name": name}
        if grant_admin:
            payload["is_admin"] = True
        self.supabase.table("users")\
            .upsert(payload, on_conflict="id")\
            .execute()
        user = self.get_user(user_id)
        if user is None:
            raise RuntimeError(f"User {user_id} missing after upsert")
        return user

    def admin_exists(self) -> bool:
        result = self.supabase.table("users")\
            .select("id")\
            .eq("is_admin", True)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def set_admin(self, user_id: int, is_admin: bool) -> Optional[User]:
        result = self.supabase.table("users")\
            .update({"is_admin": is_admin})\
            .eq("id", user_id)\
            .execute()
        if not result.data:
            return None
        return User(**result.data[0])

    def get_admins(self) -> List[User]:
        result = self.supabase.table("users")\
            .select("*")\
            .eq("is_admin", True)\
            .order("id")\
            .execute()
        return [User(**row) for row in result.data or []]

    def get_user_guild_ids(self, user_id: int) -> List[int]:
        result = self.supabase.table("user_guilds")\
            .select("guild_id")\
            .eq("user_id", user_id)\
            .execute()
        return sorted({row["guild_id"] for row in result.data or []})

    def get_category_guild_ids(self) -> List[int]:
        result = self.supabase.table("fleet_categories")\
            .select("guild_id")\
            .execute()
        return sorted({row["guild_id"] for row in result.data or []})

    # Roles

    def get_member_role_ids(self, user_id: int) -> List[int]:
        """Role ids from user_role_memberships, across every guild"""
        result = self.supabase.table("user_role_memberships")\
            .select("role_id")\
            .eq("user_id", user_id)\
            .execute()
        return list({row["role_id"] for row in result.data or []})

    def get_guild_role_ids(self, guild_id: int, role_ids: Iterable[int]) -> List[int]:
        """Restrict role_ids to those that belong to guild_id"""
        role_ids = list(role_ids)
        if not role_ids:
            return []
        result = self.supabase.table("guild_roles")\
            .select("role_id")\
            .eq("guild_id", guild_id)\
            .in_("role_id", role_ids)\
            .execute()
        return list({row["role_id"] for row in result.data or []})

    def get_role_guild_ids(self, role_ids: Iterable[int]) -> List[int]:
        role_ids = list(role_ids)
        if not role_ids:
            return []
        result = self.supabase.table("guild_roles")\
            .select("guild_id")\
            .in_("role_id", role_ids)\
            .execute()
        return sorted({row["guild_id"] for row in result.data or []})

    # Categories

    def get_category(self, category_id: int) -> Optional[FleetCategory]:
        result = self.supabase.table("fleet_categories")\
            .select("*")\
            .eq("id", category_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return FleetCategory(**result.data[0])

    def get_categories_by_guild(self, guild_id: int, limit: Optional[int] = None) -> List[FleetCategory]:
        query = self.supabase.table("fleet_categories")\
            .select("*")\
            .eq("guild_id", guild_id)\
            .order("name")
        if limit is not None:
            query = query.limit(limit)
        result = query.execute()
        return [FleetCategory(**row) for row in result.data or []]

    def get_all_categories(self, limit: Optional[int] = None) -> List[FleetCategory]:
        query = self.supabase.table("fleet_categories")\
            .select("*")\
            .order("name")
        if limit is not None:
            query = query.limit(limit)
        result = query.execute()
        return [FleetCategory(**row) for row in result.data or []]

    # Access grants

    def get_grants(self, category_id: int, role_ids: Iterable[int]) -> List[CategoryAccessGrant]:
        """Grants on one category held by any of role_ids"""
        role_ids = list(role_ids)
        if not role_ids:
            return []
        result = self.supabase.table("category_access_grants")\
            .select(GRANT_COLUMNS)\
            .eq("category_id", category_id)\
            .in_("role_id", role_ids)\
            .execute()
        return [CategoryAccessGrant(**row) for row in result.data or []]

    def get_grants_for_categories(
        self,
        category_ids: Iterable[int],
        role_ids: Iterable[int]
    ) -> List[CategoryAccessGrant]:
        """Grants for a set of categories restricted to role_ids, in one query"""
        category_ids = list(category_ids)
        role_ids = list(role_ids)
        if not category_ids or not role_ids:
            return []
        result = self.supabase.table("category_access_grants")\
            .select(GRANT_COLUMNS)\
            .in_("category_id", category_ids)\
            .in_("role_id", role_ids)\
            .execute()
        return [CategoryAccessGrant(**row) for row in result.data or []]

    def get_grants_by_category(self, category_id: int) -> List[CategoryAccessGrant]:
        result = self.supabase.table("category_access_grants")\
            .select(GRANT_COLUMNS)\
            .eq("category_id", category_id)\
            .order("role_id")\
            .execute()
        return [CategoryAccessGrant(**row) for row in result.data or []]

    def upsert_grant(self, grant: CategoryAccessGrant) -> CategoryAccessGrant:
        """Insert or overwrite the grant for (category_id, role_id)"""
        result = self.supabase.table("category_access_grants")\
            .upsert(grant.model_dump(), on_conflict="category_id,role_id")\
            .execute()
        if not result.data:
            return grant
        return CategoryAccessGrant(**result.data[0])

    def delete_grant(self, category_id: int, role_id: int) -> bool:
        result = self.supabase.table("category_access_grants")\
            .delete()\
            .eq("category_id", category_id)\
            .eq("role_id", role_id)\
            .execute()
        return len(result.data or []) > 0
