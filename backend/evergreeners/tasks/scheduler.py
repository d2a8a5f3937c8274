"""APSchedulerの設定と管理。

定期実行タスクのスケジュール登録を行う。
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from evergreeners.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=settings.SCHEDULER_TIMEZONE)


def setup_jobs() -> None:
    """スケジューラにジョブを登録する。

    - github_sync_job: SYNC_INTERVAL_HOURS ごとの0分（デフォルト 0,6,12,18時）
    - cleanup_job: 毎日 CLEANUP_HOUR 時0分（デフォルト2:00）
    """
    from evergreeners.tasks.github_sync import github_sync_job

    scheduler.add_job(
        github_sync_job,
        trigger=CronTrigger(
            hour=f"*/{settings.SYNC_INTERVAL_HOURS}",
            minute=0,
            timezone=settings.SCHEDULER_TIMEZONE,
        ),
        id="github_sync_job",
        name="GitHub Contribution Sync",
        replace_existing=True,
        max_instances=1,
    )
    logger.info(
        "Registered github_sync_job: every %d hours",
        settings.SYNC_INTERVAL_HOURS,
    )

    from evergreeners.tasks.cleanup import cleanup_job

    scheduler.add_job(
        cleanup_job,
        trigger=CronTrigger(
            hour=settings.CLEANUP_HOUR,
            minute=0,
            timezone=settings.SCHEDULER_TIMEZONE,
        ),
        id="cleanup_job",
        name="Daily Cleanup",
        replace_existing=True,
        max_instances=1,
    )
    logger.info("Registered cleanup_job: daily at %02d:00", settings.CLEANUP_HOUR)

    logger.info("All scheduled jobs registered")
