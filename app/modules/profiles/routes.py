from fastapi import APIRouter, Depends
from app.core.dependencies import CallerContext, get_current_user, get_user_supabase
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from supabase import Client

router = APIRouter(prefix="/profile", tags=["profile"])


def get_profile_service(supabase: Client = Depends(get_user_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=ProfileResponse)
async def get_my_profile(
    caller: CallerContext = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the caller's profile, materializing the default one on first visit"""
    return service.ensure_profile(caller.as_user())
