import logging
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions
from config import Settings

logger = logging.getLogger(__name__)

async def create_auth_supabase(settings: Settings) -> AsyncClient:
    """
    Client dùng cho Supabase Auth.
    Session không được lưu trong client: token của từng user luôn được truyền tường minh.
    """
    client = await acreate_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=AsyncClientOptions(
            persist_session=False,
            auto_refresh_token=False,
        ),
    )
    logger.info("Supabase auth client initialized for %s", settings.supabase_url)
    return client

async def create_data_supabase(settings: Settings) -> AsyncClient:
    """Client cho bảng profiles, dùng service role key nếu có"""
    key = settings.supabase_service_role_key or settings.supabase_anon_key
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY not set, profile table access uses the anon key")

    client = await acreate_client(
        settings.supabase_url,
        key,
        options=AsyncClientOptions(
            persist_session=False,
            auto_refresh_token=False,
        ),
    )
    logger.info("Supabase data client initialized")
    return client

async def close_supabase(client: AsyncClient) -> None:
    """Đóng các HTTP session của client khi app shutdown"""
    try:
        await client.auth.close()
        # Postgrest session chỉ được tạo khi client.table() được gọi lần đầu
        postgrest = getattr(client, "_postgrest", None)
        if postgrest is not None:
            await postgrest.aclose()
        logger.info("Supabase client closed")
    except Exception as e:
        logger.exception("Error closing Supabase client: %s", e)
