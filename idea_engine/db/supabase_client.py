"""Supabase client for the scoring tables."""

from functools import lru_cache
from urllib.parse import urlparse

from supabase import Client, create_client

from idea_engine.core.config import get_settings
from idea_engine.core.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get the service-role Supabase client (cached singleton).

    Every db module goes through this function so tests can patch it per module.

    Raises:
        RuntimeError: If the client cannot be created
    """
    settings = get_settings()
    host = urlparse(settings.SUPABASE_URL).netloc or settings.SUPABASE_URL

    try:
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client for {host}: {e}")
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e

    logger.info(f"Initialized Supabase client for {host}")
    return client
