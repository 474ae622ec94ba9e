"""Supabase client construction."""

import logging
from typing import Optional

from supabase import Client, create_client

from core.config import AppConfig

logger = logging.getLogger(__name__)


def create_backend_client(config: AppConfig) -> Optional[Client]:
    """Create a Supabase client, or None when credentials are not configured."""
    if not config.has_backend:
        logger.info("SUPABASE_URL / SUPABASE_ANON_KEY not set; running guest-only")
        return None
    return create_client(config.supabase_url, config.supabase_key)
