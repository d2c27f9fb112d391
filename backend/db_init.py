from __future__ import annotations

import logging

from sqlalchemy import text as sql_text

from backend.db import get_engine
from backend.schema import ALL_TABLES_SQL

logger = logging.getLogger(__name__)


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        for statement in ALL_TABLES_SQL:
            await conn.execute(sql_text(statement))
    logger.info("Journal tables ready")
