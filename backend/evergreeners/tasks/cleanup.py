"""日次クリーンアップタスク。

期限切れのログインセッションを削除する。
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete

from evergreeners.database import async_session_factory
from evergreeners.models import AuthSession

logger = logging.getLogger(__name__)


async def cleanup_job() -> None:
    """期限切れセッションを削除する。"""
    logger.info("Daily cleanup task triggered")

    async with async_session_factory() as session:
        try:
            stmt = delete(AuthSession).where(
                AuthSession.expires_at < datetime.now(timezone.utc),
            )
            result = await session.execute(stmt)
            await session.commit()
            logger.info("Deleted %d expired sessions", result.rowcount or 0)
        except Exception:
            await session.rollback()
            logger.exception("Daily cleanup task failed")
            raise
