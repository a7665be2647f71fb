"""
Core dependencies for route protection and admin role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from app.config.roles_config import is_admin_role
from app.config.settings import settings
from app.database.supabase_client import SupabaseClient, SupabaseConfigError, get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class CallerContext(BaseModel):
    """Everything a handler knows about the caller, resolved fresh for each request."""
    id: str
    email: Optional[str] = None
    token: str
    user_metadata: Dict[str, Any] = {}
    role_id: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None

    def as_user(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "user_metadata": self.user_metadata}


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> str:
    """Bearer header first, then the session cookie set by /auth/signin"""
    if credentials and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_current_user(
    token: str = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> CallerContext:
    """Verify the session token with Supabase Auth"""
    user_data = auth_service.get_current_user(token)
    return CallerContext(
        id=user_data["id"],
        email=user_data.get("email"),
        token=token,
        user_metadata=user_data.get("user_metadata") or {},
    )


def get_user_supabase(caller: CallerContext = Depends(get_current_user)) -> Client:
    """Client acting as the caller, so profile reads go through RLS"""
    try:
        return SupabaseClient.get_user_client(caller.token)
    except SupabaseConfigError as e:
        logger.error(f"Supabase client not configured: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


def get_caller_profile(caller: CallerContext, supabase: Client) -> Optional[Dict[str, Any]]:
    """Return the caller's profile row, or None when missing or unreadable"""
    try:
        result = supabase.table("profile")\
            .select("*")\
            .eq("id", caller.id)\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.error(f"Error loading profile for {caller.id}: {e}")
        return None
    if not result.data:
        return None
    return result.data[0]


def require_admin(
    caller: CallerContext = Depends(get_current_user),
    supabase: Client = Depends(get_user_supabase)
) -> CallerContext:
    """Dependency that lets only admin/owner callers through. Checked on every admin request."""
    profile = get_caller_profile(caller, supabase)
    if not profile or not is_admin_role(profile.get("role_id")):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return caller.model_copy(update={"role_id": profile["role_id"], "profile": profile})
