from pydantic import BaseModel

class Profile(BaseModel):
    id: str
    username: str
    full_name: str
    avatar_url: str | None = None
