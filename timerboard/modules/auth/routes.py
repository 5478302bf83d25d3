from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from typing import Optional

from timerboard.config import settings
from timerboard.core.dependencies import get_service_identity_store, require_login
from timerboard.database.identity_store import IdentityStore
from timerboard.modules.auth.admin_code import AdminCodeService, get_admin_code_service
from timerboard.modules.auth.discord import DiscordOAuthClient
from timerboard.modules.auth.service import AuthService
from timerboard.modules.auth.session import AuthSession
from timerboard.modules.users.schemas import User

router = APIRouter(prefix="/auth", tags=["auth"])


def get_discord_client() -> DiscordOAuthClient:
    return DiscordOAuthClient(
        client_id=settings.discord_client_id,
        client_secret=settings.discord_client_secret,
        redirect_uri=settings.discord_redirect_uri,
        api_base_url=settings.discord_api_base_url,
    )


def get_auth_service(
    store: IdentityStore = Depends(get_service_identity_store),
    discord: DiscordOAuthClient = Depends(get_discord_client),
    admin_codes: AdminCodeService = Depends(get_admin_code_service)
) -> AuthService:
    return AuthService(store, discord, admin_codes)


@router.get("/login")
async def login(
    request: Request,
    admin_code: Optional[str] = None,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Redirect to Discord; an admin_code grants admin to the account that logs in"""
    url = auth_service.login_url(request.session, admin_code)
    return RedirectResponse(url, status_code=307)


@router.get("/callback")
async def callback(
    request: Request,
    code: str,
    state: str,
    auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.callback(request.session, code, state)
    return RedirectResponse(settings.app_url, status_code=303)


@router.get("/me", response_model=User)
async def get_current_user(user: User = Depends(require_login)):
    """Get current authenticated user"""
    return user


@router.post("/logout", status_code=200)
async def logout(request: Request):
    """Clear the session"""
    AuthSession(request.session).clear()
    return {"message": "Logged out successfully"}
