from fastapi import HTTPException
from typing import List
import logging

from timerboard.database.identity_store import IdentityStore
from timerboard.modules.roles.service import RoleMembershipIndex
from timerboard.modules.users.schemas import SetAdminResponse, User, UserGuildsResponse

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: IdentityStore):
        self.store = store

    def get_user_guilds(self, user: User) -> UserGuildsResponse:
        """Guilds the user belongs to; admins see every guild that has categories"""
        if user.is_admin:
            guild_ids = sorted(
                set(self.store.get_category_guild_ids()) | set(self.store.get_user_guild_ids(user.id))
            )
        else:
            guild_ids = sorted(
                set(self.store.get_user_guild_ids(user.id))
                | set(RoleMembershipIndex(self.store).guilds_for(user.id))
            )
        return UserGuildsResponse(user_id=user.id, guild_ids=guild_ids)

    def list_admins(self) -> List[User]:
        return self.store.get_admins()

    def set_admin(self, user_id: int, is_admin: bool = True) -> SetAdminResponse:
        """Grant or revoke the global admin flag"""
        user = self.store.set_admin(user_id, is_admin)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        logger.info("Admin flag for user %s set to %s", user_id, is_admin)
        return SetAdminResponse(
            user_id=user.id,
            is_admin=user.is_admin,
            message=f"User {user.id} admin status set to {user.is_admin}"
        )
