import hashlib
import logging
import time
from supabase import Client
from app.modules.auth.messages import sign_in_error, sign_up_error
from app.modules.auth.schemas import LoginRequest, RegisterRequest, RegisterResponse
from app.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


def _user_to_dict(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "app_metadata": user.app_metadata or {},
        "created_at": user.created_at,
        "updated_at": user.updated_at
    }


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth. The profile row is created on first sign-in."""
        try:
            user_metadata = {}
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="Account created successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            status_code, message = sign_up_error(str(e))
            if status_code >= 500:
                logger.error(f"Sign-up failed for {register_data.email}: {e}")
            raise HTTPException(status_code=status_code, detail=message)

    def login(self, login_data: LoginRequest) -> Dict[str, Any]:
        """Authenticate user using Supabase Auth. Returns the access token and the user dict."""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            return {
                "access_token": auth_response.session.access_token,
                "user": _user_to_dict(auth_response.user),
            }
        except HTTPException:
            raise
        except Exception as e:
            status_code, message = sign_in_error(str(e))
            if status_code >= 500:
                logger.error(f"Sign-in failed for {login_data.email}: {e}")
            raise HTTPException(status_code=status_code, detail=message)

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            cached = _AUTH_USER_CACHE.get(cache_key)
            if cached is not None:
                user_data, expiry = cached
                if now < expiry:
                    return user_data
                # Another request may have dropped the same expired entry already
                _AUTH_USER_CACHE.pop(cache_key, None)
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Unauthorized")
            user_data = _user_to_dict(user_response.user)
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + settings.auth_cache_ttl_sec)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            logger.info(f"Token verification failed: {e}")
            raise HTTPException(status_code=401, detail="Unauthorized")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        # Drop the cached verification so the token stops working here right away
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side
            self.supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Supabase sign-out failed: {e}")
            return False
