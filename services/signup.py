import logging
from typing import Any, Mapping

from models.auth import AuthIdentity
from services.auth_client import AuthClient
from services.errors import UnknownError, UsernameTaken
from services.profile_store import ProfileStore
from services.validation import validate_signup

logger = logging.getLogger(__name__)


class SignupOrchestrator:
    def __init__(self, auth: AuthClient, profiles: ProfileStore):
        self.auth = auth
        self.profiles = profiles

    async def sign_up(self, raw: Mapping[str, Any]) -> AuthIdentity:
        """Tạo tài khoản: auth identity trước, sau đó là profile"""
        form = validate_signup(raw)
        logger.info("Signup request for email: %s", form.email)

        identity = await self.auth.sign_up(
            form.email, form.password, form.username, form.full_name
        )
        if identity is None:
            logger.error("Sign up for %s succeeded without user data", form.email)
            raise UnknownError()

        try:
            await self.profiles.insert_profile(identity.id, form.username, form.full_name)
        except (UsernameTaken, UnknownError) as e:
            logger.warning(
                "Auth identity %s has no profile after failed insert (%s)",
                identity.id, e.kind.value,
            )
            raise

        logger.info("Account created for %s", form.email)
        return identity
