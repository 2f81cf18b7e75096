"""Optional-schema capability flags, resolved once at startup."""

import logging
from dataclasses import dataclass

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaCapabilities:
    # Legacy databases only carry users.role; newer ones also have users.user_type
    users_have_user_type: bool = False


async def resolve_capabilities(engine: AsyncEngine) -> SchemaCapabilities:
    """Inspect the live schema unless the setting pins the answer."""
    if settings.users_have_user_type is not None:
        caps = SchemaCapabilities(users_have_user_type=settings.users_have_user_type)
        logger.info("Schema capabilities from settings: %s", caps)
        return caps

    async with engine.connect() as conn:
        columns = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_columns("users"))

    caps = SchemaCapabilities(users_have_user_type=any(c["name"] == "user_type" for c in columns))
    logger.info("Schema capabilities detected: %s", caps)
    return caps
