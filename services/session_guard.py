import logging
from dataclasses import dataclass, field
from typing import List, Optional

from models.auth import AuthIdentity, AuthSession
from models.profile import Profile
from services.auth_client import AuthClient
from services.errors import PortalError
from services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
PROFILE_LOAD_FAILED = "Unable to load profile"


@dataclass
class GuardDecision:
    """What a session-gated view should do on entry"""

    redirect_to: Optional[str] = None
    identity: Optional[AuthIdentity] = None
    profile: Optional[Profile] = None
    refreshed: Optional[AuthSession] = None
    notifications: List[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None


class SessionGuard:
    def __init__(self, auth: AuthClient, profiles: ProfileStore):
        self.auth = auth
        self.profiles = profiles

    async def enter(
        self, access_token: Optional[str], refresh_token: Optional[str] = None
    ) -> GuardDecision:
        identity = await self.auth.current_user(access_token)
        refreshed = None

        if identity is None and refresh_token:
            refreshed = await self.auth.refresh(refresh_token)
            if refreshed is not None:
                identity = refreshed.user
                logger.info("Session refreshed for %s", identity.id)

        if identity is None:
            return GuardDecision(redirect_to=LOGIN_PATH)

        decision = GuardDecision(identity=identity, refreshed=refreshed)
        try:
            decision.profile = await self.profiles.fetch_profile(identity.id)
        except PortalError as e:
            # Degraded view: the page still renders without profile data
            logger.warning("Profile unavailable for %s: %s", identity.id, e.kind.value)
            decision.notifications.append(PROFILE_LOAD_FAILED)
        return decision
