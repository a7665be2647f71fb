import logging
from fastapi import HTTPException
from supabase import create_client, Client, ClientOptions
from app.config.settings import settings

logger = logging.getLogger(__name__)


class SupabaseConfigError(RuntimeError):
    """Raised when the Supabase URL or keys are missing from the environment."""


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def _require_public_config(cls):
        # No embedded fallbacks: URL and anon key must come from the environment
        if not settings.supabase_url or not settings.supabase_key:
            raise SupabaseConfigError("SUPABASE_URL and SUPABASE_KEY must be set")

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._require_public_config()
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Server-side admin operations only."""
        if cls._service_client is None:
            if not settings.supabase_url or not settings.supabase_service_role_key:
                raise SupabaseConfigError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client

    @classmethod
    def new_client(cls) -> Client:
        """Uncached anon client for sign-in/sign-up, which store a session on the client."""
        cls._require_public_config()
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def get_user_client(cls, token: str) -> Client:
        """Uncached client whose table queries run as the caller, so RLS applies."""
        cls._require_public_config()
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(headers={"Authorization": f"Bearer {token}"}),
        )

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    try:
        return SupabaseClient.get_client()
    except SupabaseConfigError as e:
        logger.error(f"Supabase client not configured: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


def get_session_supabase() -> Client:
    try:
        return SupabaseClient.new_client()
    except SupabaseConfigError as e:
        logger.error(f"Supabase client not configured: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


def get_service_supabase() -> Client:
    try:
        return SupabaseClient.get_service_client()
    except SupabaseConfigError as e:
        logger.error(f"Supabase service client not configured: {e}")
        raise HTTPException(status_code=500, detail="Service role key not configured")
