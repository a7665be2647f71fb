import logging
from supabase import Client
from fastapi import HTTPException
from app.config.roles_config import PLANS, ROLES, SORTABLE_COLUMNS
from app.config.settings import settings
from app.modules.admin import query
from app.modules.admin.schemas import (
    UserQuery, UserTableResponse, UserStats, UserView,
    CreateUserRequest, CreateUserResponse, CreatedUser,
    DeleteUserResponse, UpdateRoleRequest, UpdateRoleResponse
)
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DUPLICATE_IDENTITY_PHRASES = ("already registered", "already been registered", "already exists", "duplicate")
REQUIRED_CREATE_FIELDS = ("email", "password", "full_name", "role_id", "plan")


def _is_duplicate_profile_error(error: Exception) -> bool:
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    return code == "23505" or "duplicate key" in message


def _identity_to_dict(user) -> Dict[str, Any]:
    return {"id": user.id, "email": user.email, "created_at": user.created_at}


class AdminUserService:
    """Admin operations over auth.users + profile. Expects the service-role client."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Reads

    def get_stats(self) -> UserStats:
        """Plan and admin counts over every profile"""
        try:
            result = self.supabase.table("profile")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profiles for stats: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch user stats")
        return query.compute_stats(result.data or [])

    def list_identities(self) -> List[Dict[str, Any]]:
        """Every auth user, paging through the admin API until a short page"""
        per_page = settings.identity_page_size
        identities = []
        page = 1
        while True:
            users = self.supabase.auth.admin.list_users(page=page, per_page=per_page)
            identities.extend(_identity_to_dict(user) for user in users)
            if len(users) < per_page:
                return identities
            page += 1

    def fetch_profiles(
        self,
        role: Optional[str] = None,
        plan: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc"
    ) -> List[Dict[str, Any]]:
        profile_query = self.supabase.table("profile").select("*")
        if role:
            profile_query = profile_query.eq("role_id", role)
        if plan:
            profile_query = profile_query.eq("plan", plan)
        result = profile_query.order(sort_by, desc=sort_order != "asc").execute()
        return result.data or []

    def collect_users(self, user_query: UserQuery) -> List[UserView]:
        """Merged, filtered, sorted and searched users, before pagination"""
        if user_query.sort_by not in SORTABLE_COLUMNS:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid sort column. Must be one of: {', '.join(SORTABLE_COLUMNS)}"
            )
        if user_query.sort_order not in ("asc", "desc"):
            raise HTTPException(status_code=400, detail="Invalid sort order. Must be asc or desc")

        try:
            identities = self.list_identities()
        except Exception as e:
            logger.error(f"Error fetching auth users: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch users")

        try:
            profiles = self.fetch_profiles(
                role=user_query.role,
                plan=user_query.plan,
                sort_by=user_query.sort_by,
                sort_order=user_query.sort_order,
            )
        except Exception as e:
            logger.error(f"Error fetching profiles: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch profiles")

        users = query.merge_users(profiles, identities)
        return query.search_users(users, user_query.search)

    def list_users(self, user_query: UserQuery) -> UserTableResponse:
        users = self.collect_users(user_query)
        page_users, pagination = query.paginate(users, user_query.page, user_query.page_size)
        return UserTableResponse(users=page_users, pagination=pagination)

    # Mutations

    def create_user(self, user_data: CreateUserRequest) -> CreateUserResponse:
        """Create a confirmed auth user and its profile; undo the auth user if the profile fails"""
        if any(not getattr(user_data, field) for field in REQUIRED_CREATE_FIELDS):
            raise HTTPException(
                status_code=400,
                detail=f"Missing required fields: {', '.join(REQUIRED_CREATE_FIELDS)}"
            )
        if user_data.role_id not in ROLES:
            raise HTTPException(status_code=400, detail="Invalid role. Must be client, admin, or owner")
        if user_data.plan not in PLANS:
            raise HTTPException(status_code=400, detail="Invalid plan. Must be free, pro, or enterprise")

        logger.info(f"Creating user {user_data.email}")
        try:
            auth_response = self.supabase.auth.admin.create_user({
                "email": user_data.email,
                "password": user_data.password,
                "email_confirm": True,
                "user_metadata": {"full_name": user_data.full_name}
            })
        except Exception as e:
            logger.error(f"Error creating auth user: {e}")
            if any(phrase in str(e).lower() for phrase in DUPLICATE_IDENTITY_PHRASES):
                raise HTTPException(status_code=400, detail="User with this email already exists")
            raise HTTPException(status_code=500, detail="Failed to create user account")

        auth_user = auth_response.user if auth_response else None
        if not auth_user:
            raise HTTPException(status_code=500, detail="Failed to create user account")

        try:
            existing = self.supabase.table("profile")\
                .select("id")\
                .eq("id", auth_user.id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error checking existing profile: {e}")
            self._remove_identity(auth_user.id)
            raise HTTPException(status_code=500, detail="Failed to create user profile")

        if existing.data:
            logger.info(f"Profile already exists for {auth_user.id}, cleaning up auth user")
            self._remove_identity(auth_user.id)
            raise HTTPException(status_code=400, detail="User profile already exists")

        try:
            result = self.supabase.table("profile").insert({
                "id": auth_user.id,
                "full_name": user_data.full_name,
                "role_id": user_data.role_id,
                "plan": user_data.plan
            }).execute()
            if not result.data:
                raise RuntimeError("profile insert returned no row")
        except Exception as e:
            logger.error(
                f"Error creating profile for {auth_user.id} "
                f"(role_id={user_data.role_id}, plan={user_data.plan}): {e}"
            )
            self._remove_identity(auth_user.id)
            if _is_duplicate_profile_error(e):
                raise HTTPException(status_code=400, detail="User profile already exists")
            raise HTTPException(status_code=500, detail="Failed to create user profile")

        profile = result.data[0]
        return CreateUserResponse(user=CreatedUser(
            id=auth_user.id,
            email=auth_user.email,
            full_name=profile.get("full_name"),
            role_id=profile["role_id"],
            plan=profile["plan"],
            created_at=query.as_text(auth_user.created_at),
        ))

    def _remove_identity(self, user_id: str) -> bool:
        """Compensating delete; not atomic with the failed step"""
        try:
            self.supabase.auth.admin.delete_user(user_id)
            logger.info(f"Cleaned up auth user {user_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to clean up auth user {user_id}: {e}")
            return False

    def delete_user(self, target_id: Optional[str], caller_id: str) -> DeleteUserResponse:
        """Delete the auth user; the profile row goes with it through the cascade"""
        if not target_id:
            raise HTTPException(status_code=400, detail="User ID is required")
        if target_id == caller_id:
            raise HTTPException(status_code=400, detail="Cannot delete your own account")
        try:
            self.supabase.auth.admin.delete_user(target_id)
        except Exception as e:
            logger.error(f"Error deleting user {target_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user")
        logger.info(f"Deleted user {target_id}")
        return DeleteUserResponse(message="User deleted successfully")

    def update_role(self, role_data: UpdateRoleRequest) -> UpdateRoleResponse:
        """Change profile.role_id. The target's existing session keeps its cached role until it refetches."""
        if not role_data.user_id or not role_data.new_role:
            raise HTTPException(status_code=400, detail="User ID and new role are required")
        if role_data.new_role not in ROLES:
            raise HTTPException(status_code=400, detail="Invalid role. Must be client, admin, or owner")
        try:
            result = self.supabase.table("profile")\
                .update({"role_id": role_data.new_role})\
                .eq("id", role_data.user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating role for {role_data.user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update user role")
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"Role of {role_data.user_id} set to {role_data.new_role}")
        return UpdateRoleResponse(user=result.data[0], message="User role updated successfully")
