"""
Authentication and authorization failures raised by the permission engine.

Each failure terminates the check it occurs in; callers translate them into
transport responses (see the handler registered in timerboard.main).
"""

from fastapi import status


class AuthError(Exception):
    """Base class for permission engine failures."""

    http_status: int = status.HTTP_403_FORBIDDEN
    public_detail: str = "Insufficient permissions"


class UserNotInSession(AuthError):
    """No user id stored in the session; the caller is anonymous."""

    http_status = status.HTTP_401_UNAUTHORIZED
    public_detail = "Not authenticated"

    def __init__(self):
        super().__init__("User not found in session")


class InvalidIdentifier(AuthError):
    """The session held a value that does not parse as a user id."""

    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_detail = "Session is invalid, please log in again"

    def __init__(self, raw_value: str):
        self.raw_value = raw_value
        super().__init__(f"Failed to parse user id from session value {raw_value!r}")


class UserNotInDatabase(AuthError):
    http_status = status.HTTP_401_UNAUTHORIZED
    public_detail = "Not authenticated"

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found in database")


class AccessDenied(AuthError):
    """Authenticated user lacks a required capability. The reason is for logs only."""

    http_status = status.HTTP_403_FORBIDDEN
    public_detail = "Insufficient permissions"

    def __init__(self, user_id: int, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Access denied for user {user_id}: {reason}")


class CsrfValidationFailed(AuthError):
    """OAuth callback state does not match the state stored at login."""

    http_status = status.HTTP_400_BAD_REQUEST
    public_detail = "There was an issue logging you in, please try again."

    def __init__(self):
        super().__init__("Failed to login user due to CSRF state mismatch")


class AdminCodeValidationFailed(AuthError):
    http_status = status.HTTP_403_FORBIDDEN
    public_detail = "Invalid or expired admin code."

    def __init__(self):
        super().__init__("Invalid or expired admin code")


class DiscordLoginFailed(AuthError):
    """Discord rejected the code exchange or the user lookup."""

    http_status = status.HTTP_502_BAD_GATEWAY
    public_detail = "There was an issue logging you in, please try again."
