from fastapi import APIRouter, Depends
from models.auth import AuthIdentity
from models.profile import Profile
from services.profile_store import ProfileStore
from dependencies import get_current_user, get_profile_store

router = APIRouter(prefix="/profiles", tags=["Profiles"])

@router.get("/me", response_model=Profile)
async def get_my_profile(
    current_user: AuthIdentity = Depends(get_current_user),
    profiles: ProfileStore = Depends(get_profile_store)
):
    """Lấy profile của user hiện tại"""
    return await profiles.fetch_profile(current_user.id)
