import logging
from supabase import Client
from app.config.roles_config import DEFAULT_PLAN, DEFAULT_ROLE, is_admin_role
from app.modules.profiles.schemas import ProfileResponse
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ADMIN_HOME = "/admin"
CLIENT_HOME = "/dashboard"


def redirect_for_role(role_id: Optional[str]) -> str:
    """Where the dashboard sends a user after sign-in"""
    return ADMIN_HOME if is_admin_role(role_id) else CLIENT_HOME


def default_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    metadata = user.get("user_metadata") or {}
    return {
        "id": user["id"],
        "full_name": metadata.get("full_name") or "",
        "role_id": DEFAULT_ROLE,
        "plan": DEFAULT_PLAN,
    }


class ProfileService:
    """Reads and materializes the caller's own profile row. Expects a user-scoped client."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("profile")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return result.data[0]

    def ensure_profile(self, user: Dict[str, Any]) -> ProfileResponse:
        """Return the user's profile, creating a default client/free row on first sign-in.

        If the row cannot be read or written the unsaved default is returned
        (persisted=False), so the session continues with client access.
        """
        try:
            profile = self.get_profile(user["id"])
        except Exception as e:
            logger.error(f"Error fetching profile for {user['id']}: {e}")
            return ProfileResponse(**default_profile(user), persisted=False)

        if profile:
            return ProfileResponse(**profile)

        logger.info(f"Profile not found for {user['id']}, creating default profile")
        fallback = default_profile(user)
        try:
            result = self.supabase.table("profile").insert(fallback).execute()
        except Exception as e:
            logger.error(f"Error creating profile for {user['id']}: {e}")
            return ProfileResponse(**fallback, persisted=False)

        if not result.data:
            return ProfileResponse(**fallback, persisted=False)
        return ProfileResponse(**result.data[0])
