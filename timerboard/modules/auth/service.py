"""
Discord login: start the OAuth flow, finish it on callback, and bootstrap the
first admin with a one-time code.
"""

import logging
import secrets
from typing import Any, MutableMapping, Optional

from timerboard.config import settings
from timerboard.database.identity_store import IdentityStore
from timerboard.modules.auth.admin_code import AdminCodeService
from timerboard.modules.auth.discord import DiscordOAuthClient
from timerboard.modules.auth.errors import (
    AdminCodeValidationFailed, CsrfValidationFailed, DiscordLoginFailed, InvalidIdentifier
)
from timerboard.modules.auth.session import AuthSession, OAuthFlowSession, parse_user_id
from timerboard.modules.users.schemas import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, store: IdentityStore, discord: DiscordOAuthClient, admin_codes: AdminCodeService):
        self.store = store
        self.discord = discord
        self.admin_codes = admin_codes

    def login_url(self, session: MutableMapping[str, Any], admin_code: Optional[str] = None) -> str:
        """Store a fresh CSRF state and return the Discord authorize URL.

        A valid admin code is consumed here and remembered in the session, so the
        callback grants admin to whichever account completes the login.
        """
        flow = OAuthFlowSession(session)
        if admin_code is not None:
            if not self.admin_codes.validate_and_consume(admin_code):
                raise AdminCodeValidationFailed()
            flow.set_admin_flag(True)

        state = secrets.token_urlsafe(32)
        flow.set_state(state)
        return self.discord.authorize_url(state)

    def callback(self, session: MutableMapping[str, Any], code: str, state: str) -> User:
        flow = OAuthFlowSession(session)
        # Both values are single use, a failed callback needs a new login
        expected_state = flow.take_state()
        set_admin = flow.take_admin_flag()
        if expected_state is None or not secrets.compare_digest(expected_state, state):
            raise CsrfValidationFailed()

        access_token = self.discord.exchange_code(code)
        discord_user = self.discord.fetch_user(access_token)
        try:
            user_id = parse_user_id(str(discord_user["id"]))
        except InvalidIdentifier as exc:
            raise DiscordLoginFailed("Discord returned a malformed user id") from exc
        name = discord_user.get("global_name") or discord_user.get("username")

        user = self.store.upsert_user(user_id, name, grant_admin=set_admin)
        AuthSession(session).set_user_id(user.id)
        if set_admin:
            logger.info("User %s logged in with admin code and is now an admin", user.id)
        else:
            logger.info("User %s logged in", user.id)
        return user


def check_for_admin(store: IdentityStore, admin_codes: AdminCodeService) -> Optional[str]:
    """Generate an admin code when no admin exists; returns the code or None"""
    if store.admin_exists():
        return None
    code = admin_codes.generate()
    logger.warning(
        "No admin found, log in within %s seconds to become admin: %s/api/v1/auth/login?admin_code=%s",
        admin_codes.ttl_seconds,
        settings.app_url.rstrip("/"),
        code,
    )
    return code
