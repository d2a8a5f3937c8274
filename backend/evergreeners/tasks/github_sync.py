"""GitHubバックグラウンド同期タスク。

APSchedulerから呼ばれ、連携済みかつ同期有効な全ユーザーを
1件ずつ順番に同期する。GitHub APIのレート制限を考慮し、
ユーザー間に一定の待機を挟む。
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import select

from evergreeners.config import settings
from evergreeners.database import async_session_factory
from evergreeners.models import User
from evergreeners.services.sync_service import SyncResult, SyncService

logger = logging.getLogger(__name__)


async def get_sync_target_ids() -> list[str]:
    """同期対象（GitHub連携済みかつ同期有効）のユーザーIDを取得する。"""
    async with async_session_factory() as session:
        stmt = (
            select(User.id)
            .where(
                User.is_github_connected.is_(True),
                User.github_sync_enabled.is_(True),
            )
            .order_by(User.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


async def sync_single_user(user_id: str) -> SyncResult:
    """1ユーザーを専用セッションで同期し、成功時のみコミットする。

    Args:
        user_id: 同期対象のユーザーID。

    Returns:
        SyncResult。
    """
    async with async_session_factory() as session:
        try:
            result = await SyncService(session=session).sync_user(user_id)
            if result.ok:
                await session.commit()
            else:
                await session.rollback()
            return result
        except Exception:
            await session.rollback()
            raise


async def github_sync_job() -> None:
    """APSchedulerから呼ばれる定期同期ジョブ。

    ユーザーごとのエラーはログに記録してスキップし、バッチ全体は継続する。
    """
    logger.info("Starting GitHub sync for all users")

    try:
        user_ids = await get_sync_target_ids()
    except Exception:
        logger.exception("Scheduled GitHub sync job failed")
        raise

    logger.info("Found %d users to sync", len(user_ids))

    synced = 0
    for index, user_id in enumerate(user_ids):
        if index > 0:
            await asyncio.sleep(settings.SYNC_BATCH_DELAY_SECONDS)

        try:
            result = await sync_single_user(user_id)
        except Exception:
            logger.exception("Failed to sync GitHub data for user %s", user_id)
            continue

        if result.ok:
            synced += 1
        else:
            logger.warning(
                "Skipped user %s: %s (%s)",
                user_id,
                result.failure.value if result.failure else "unknown",
                result.detail,
            )

    logger.info(
        "GitHub sync completed: %d/%d users synced",
        synced,
        len(user_ids),
    )
