from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: Optional[str] = None
    profiles_table: str = "profiles"

    # Session cookies
    access_cookie_name: str = "sb-access-token"
    refresh_cookie_name: str = "sb-refresh-token"
    flash_cookie_name: str = "flash"
    remember_me_max_age: int = 60 * 60 * 24 * 30
    cookie_secure: bool = False

    # Frontend URL
    frontend_url: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings():
    return Settings()
