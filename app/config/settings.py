from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # Public anon key
    supabase_service_role_key: Optional[str] = None  # Required for admin operations (listing, create, delete, role changes)

    # Session
    session_cookie_name: str = "sb-access-token"
    session_cookie_max_age: int = 60 * 60  # seconds, matches Supabase default access token lifetime
    auth_cache_ttl_sec: int = 60

    # Admin user table
    default_page_size: int = 10
    max_page_size: int = 100
    identity_page_size: int = 1000  # per_page when paging through auth.admin.list_users

    # App
    app_name: str = "usdrop-admin"
    api_prefix: str = "/api/v1"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"  # sign-in and sign-up, per client address

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
