import logging
from supabase import AsyncClient, PostgrestAPIError
from models.profile import Profile
from services.errors import ProfileNotFound, UnknownError, UsernameTaken

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
PROFILE_COLUMNS = "id, username, full_name, avatar_url"

class ProfileStore:
    """Profile Store facade over the single ``profiles`` table"""

    def __init__(self, client: AsyncClient, table: str = "profiles"):
        self._client = client
        self._table = table

    async def insert_profile(self, user_id: str, username: str, full_name: str) -> None:
        try:
            await self._client.table(self._table).insert({
                "id": user_id,
                "username": username,
                "full_name": full_name
            }).execute()
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info("Username %s already taken", username)
                raise UsernameTaken()
            logger.exception("Profile insert rejected for %s", user_id)
            raise UnknownError()
        except Exception:
            logger.exception("Unexpected profile insert failure for %s", user_id)
            raise UnknownError()

        logger.info("Profile created for %s (%s)", user_id, username)

    async def fetch_profile(self, user_id: str) -> Profile:
        try:
            result = await self._client.table(self._table).select(PROFILE_COLUMNS).eq("id", user_id).execute()
        except Exception:
            logger.exception("Error fetching profile %s", user_id)
            raise UnknownError("Unable to load profile")

        if not result.data:
            raise ProfileNotFound()

        return Profile(**result.data[0])
