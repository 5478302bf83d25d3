from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin operations like granting admin

    # Session cookie
    session_secret_key: str = "change-me"
    session_cookie_name: str = "timerboard_session"
    session_max_age: int = 60 * 60 * 24 * 7
    session_https_only: bool = False

    # Discord OAuth2
    discord_client_id: str = ""
    discord_client_secret: str = ""
    discord_redirect_uri: str = "http://localhost:8080/api/v1/auth/callback"
    discord_api_base_url: str = "https://discord.com/api"
    app_url: str = "http://localhost:8080"  # where users land after login
    admin_code_ttl_seconds: int = 60

    # Permissions
    admin_category_page_size: int = 1000  # cap on categories listed for admins

    # App
    app_name: str = "timerboard"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:8080,http://127.0.0.1:3000,http://127.0.0.1:8080"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
