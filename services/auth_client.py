import logging
from typing import Optional

from supabase import AsyncClient, AuthApiError, AuthError, AuthRetryableError, AuthWeakPasswordError

from models.auth import AuthIdentity, AuthSession
from services.errors import (
    EmailAlreadyRegistered,
    FormValidationError,
    InvalidCredentials,
    UnknownError,
)

logger = logging.getLogger(__name__)

EMAIL_CONFLICT_STATUS = 422


def _identity(user) -> AuthIdentity:
    return AuthIdentity(id=str(user.id), email=user.email)


def _session(session, user) -> AuthSession:
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user=_identity(user or session.user),
    )


class AuthClient:
    """Narrow wrapper around ``AsyncClient.auth``"""

    def __init__(self, client: AsyncClient):
        self._client = client

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            response = await self._client.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except AuthRetryableError:
            logger.exception("Supabase unreachable during sign in")
            raise UnknownError()
        except AuthError as e:
            # Wrong password and unknown email look the same to the caller
            logger.info("Sign in rejected for %s: %s", email, getattr(e, "code", None))
            raise InvalidCredentials()
        except Exception:
            logger.exception("Unexpected sign in failure")
            raise UnknownError()

        if not response.session:
            # Email not verified
            logger.info("Sign in for %s returned no session", email)
            raise InvalidCredentials()

        logger.info("User signed in: %s", email)
        return _session(response.session, response.user)

    async def sign_up(
        self, email: str, password: str, username: str, full_name: str
    ) -> Optional[AuthIdentity]:
        try:
            response = await self._client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": {
                        "username": username,
                        "full_name": full_name
                    }
                }
            })
        except AuthWeakPasswordError as e:
            raise FormValidationError({"password": e.message})
        except AuthApiError as e:
            if e.status == EMAIL_CONFLICT_STATUS:
                logger.info("Sign up conflict for %s", email)
                raise EmailAlreadyRegistered()
            logger.exception("Sign up rejected for %s", email)
            raise UnknownError()
        except Exception:
            logger.exception("Unexpected sign up failure for %s", email)
            raise UnknownError()

        user = response.user
        if user is None:
            return None

        # With email confirmation on, Supabase answers an existing address
        # with a fake user that has no identities
        if user.identities is not None and len(user.identities) == 0:
            logger.info("Sign up for already registered email %s", email)
            raise EmailAlreadyRegistered()

        logger.info("Auth identity created for %s", email)
        return _identity(user)

    async def sign_out(self, access_token: str) -> None:
        try:
            await self._client.auth.admin.sign_out(access_token)
        except Exception:
            logger.exception("Sign out failed")
            raise UnknownError("Error signing out")

    async def current_user(self, access_token: Optional[str]) -> Optional[AuthIdentity]:
        """Absence means "not authenticated"; never raises"""
        if not access_token:
            return None
        try:
            response = await self._client.auth.get_user(access_token)
        except Exception as e:
            logger.debug("Token rejected by Supabase: %s", e)
            return None
        if not response or not response.user:
            return None
        return _identity(response.user)

    async def refresh(self, refresh_token: Optional[str]) -> Optional[AuthSession]:
        if not refresh_token:
            return None
        try:
            response = await self._client.auth.refresh_session(refresh_token)
        except Exception as e:
            logger.debug("Refresh token rejected by Supabase: %s", e)
            return None
        if not response.session:
            return None
        return _session(response.session, response.user)
