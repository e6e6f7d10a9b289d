import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, Response, status
from models.auth import AuthIdentity, AuthResponse
from services.auth_client import AuthClient
from services.signup import SignupOrchestrator
from services.validation import validate_login
from dependencies import get_auth_client, get_bearer_token, get_current_user, get_signup_orchestrator

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)

@router.post("/signup", response_model=AuthIdentity, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: Dict[str, Any] = Body(...),
    orchestrator: SignupOrchestrator = Depends(get_signup_orchestrator)
):
    """Create auth identity, then its profile row"""
    # PortalError subclasses are turned into JSON by the handler in main.py
    return await orchestrator.sign_up(payload)

@router.post("/login", response_model=AuthResponse)
async def login(
    payload: Dict[str, Any] = Body(...),
    auth: AuthClient = Depends(get_auth_client)
):
    """Login with email/password"""
    credentials = validate_login(payload)
    session = await auth.sign_in(credentials.email, credentials.password)

    return AuthResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user=session.user
    )

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_bearer_token),
    auth: AuthClient = Depends(get_auth_client)
):
    await auth.sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/me", response_model=AuthIdentity)
async def get_me(current_user: AuthIdentity = Depends(get_current_user)):
    """Get current logged-in user info"""
    return current_user
