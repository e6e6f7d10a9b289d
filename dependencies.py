from fastapi import Depends, Header, Request
from typing import Optional
from models.auth import AuthIdentity
from services.auth_client import AuthClient
from services.errors import NotAuthenticated
from services.profile_store import ProfileStore
from services.session_guard import SessionGuard
from services.signup import SignupOrchestrator
from services.submissions import SubmissionRegistry

def get_auth_client(request: Request) -> AuthClient:
    """Facade tạo trong lifespan của app"""
    return request.app.state.auth_client

def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store

def get_submissions(request: Request) -> SubmissionRegistry:
    return request.app.state.submissions

def get_signup_orchestrator(
    auth: AuthClient = Depends(get_auth_client),
    profiles: ProfileStore = Depends(get_profile_store)
) -> SignupOrchestrator:
    return SignupOrchestrator(auth, profiles)

def get_session_guard(
    auth: AuthClient = Depends(get_auth_client),
    profiles: ProfileStore = Depends(get_profile_store)
) -> SessionGuard:
    return SessionGuard(auth, profiles)

def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Lấy access token từ header Authorization"""
    if not authorization or not authorization.startswith("Bearer "):
        raise NotAuthenticated("Missing or invalid authorization header")
    return authorization.split(" ", 1)[1]

async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: AuthClient = Depends(get_auth_client)
) -> AuthIdentity:
    """Lấy user hiện tại từ JWT token"""
    user = await auth.current_user(token)
    if user is None:
        raise NotAuthenticated()
    return user
