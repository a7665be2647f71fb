from fastapi import APIRouter, Depends, Request, Response
from app.config.settings import settings
from app.core.rate_limit import limiter
from app.database.supabase_client import SupabaseClient, get_session_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, MeResponse
)
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService, redirect_for_role
from app.core.dependencies import CallerContext, get_current_user, get_session_token, get_user_supabase, get_auth_service
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


def get_session_auth_service(supabase: Client = Depends(get_session_supabase)) -> AuthService:
    return AuthService(supabase)


def _set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post("/signup", response_model=RegisterResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def signup(
    request: Request,
    register_data: RegisterRequest,
    service: AuthService = Depends(get_session_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/signin", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def signin(
    request: Request,
    login_data: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_session_auth_service)
):
    """Sign in, set the session cookie and tell the dashboard where to go"""
    session = service.login(login_data)
    user = session["user"]
    profile = ProfileService(SupabaseClient.get_user_client(session["access_token"])).ensure_profile(user)
    _set_session_cookie(response, session["access_token"])
    return TokenResponse(
        access_token=session["access_token"],
        user_id=user["id"],
        email=user.get("email") or login_data.email,
        role_id=profile.role_id,
        redirect_to=redirect_for_role(profile.role_id),
    )


@router.post("/signout", status_code=200)
async def signout(
    response: Response,
    token: str = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service)
):
    """Sign out and clear the session cookie"""
    service.logout(token)
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Signed out successfully"}


@router.get("/me", response_model=MeResponse)
async def me(
    caller: CallerContext = Depends(get_current_user),
    supabase: Client = Depends(get_user_supabase),
):
    """Current user, their profile (created if missing) and the role-based landing page"""
    profile = ProfileService(supabase).ensure_profile(caller.as_user())
    return {
        "user": caller.as_user(),
        "profile": profile.model_dump(mode="json"),
        "redirect_to": redirect_for_role(profile.role_id),
    }
