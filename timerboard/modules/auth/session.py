"""
Session helpers for the authenticated user id.

The session itself is Starlette's signed-cookie session (SessionMiddleware);
these helpers only know the key the user id lives under and how to turn the
stored string back into a user.
"""

import logging
import re
from typing import Any, MutableMapping, Optional

from timerboard.database.identity_store import IdentityStore
from timerboard.modules.auth.errors import InvalidIdentifier, UserNotInDatabase, UserNotInSession
from timerboard.modules.users.schemas import User

logger = logging.getLogger(__name__)

SESSION_AUTH_USER_ID = "auth:user"
SESSION_AUTH_CSRF_STATE = "auth:csrf_state"
SESSION_AUTH_SET_ADMIN = "auth:set_admin"

_USER_ID_PATTERN = re.compile(r"\+?[0-9]{1,20}")
_MAX_USER_ID = 2 ** 64 - 1


class AuthSession:
    def __init__(self, session: MutableMapping[str, Any]):
        self.session = session

    def get_user_id(self) -> Optional[str]:
        """Raw stored user id, unparsed; None when nobody is logged in"""
        value = self.session.get(SESSION_AUTH_USER_ID)
        if value is None:
            return None
        return str(value)

    def set_user_id(self, user_id) -> None:
        self.session[SESSION_AUTH_USER_ID] = str(user_id)

    def clear(self) -> None:
        self.session.clear()


class OAuthFlowSession:
    """State carried across the redirect to Discord and back"""

    def __init__(self, session: MutableMapping[str, Any]):
        self.session = session

    def set_state(self, state: str) -> None:
        self.session[SESSION_AUTH_CSRF_STATE] = state

    def take_state(self) -> Optional[str]:
        return self.session.pop(SESSION_AUTH_CSRF_STATE, None)

    def set_admin_flag(self, set_admin: bool) -> None:
        self.session[SESSION_AUTH_SET_ADMIN] = set_admin

    def take_admin_flag(self) -> bool:
        return bool(self.session.pop(SESSION_AUTH_SET_ADMIN, False))


def parse_user_id(raw_value: str) -> int:
    """Parse a stored Discord id.

    Accepts ASCII digits with an optional leading "+", up to 2**64 - 1. Whitespace,
    signs other than "+", underscores and overflow raise InvalidIdentifier.
    """
    if not _USER_ID_PATTERN.fullmatch(raw_value):
        raise InvalidIdentifier(raw_value)
    user_id = int(raw_value)
    if user_id > _MAX_USER_ID:
        raise InvalidIdentifier(raw_value)
    return user_id


class SessionResolver:
    def __init__(self, store: IdentityStore):
        self.store = store

    def resolve(self, session: MutableMapping[str, Any]) -> User:
        """Resolve the full user record for the session or raise an AuthError"""
        raw_value = AuthSession(session).get_user_id()
        if raw_value is None:
            logger.debug("No user id in session")
            raise UserNotInSession()

        # Malformed ids are logged once, by the AuthError handler that clears the session
        user_id = parse_user_id(raw_value)

        user = self.store.get_user(user_id)
        if user is None:
            logger.info("Session user %s no longer exists", user_id)
            raise UserNotInDatabase(user_id)
        return user
