"""GitHub同期関連のPydanticスキーマ。"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from evergreeners.schemas.common import CamelModel


class GitHubSyncResponse(CamelModel):
    """強制同期レスポンス。"""

    success: bool = True
    username: str
    streak: int
    longest_streak: int
    total_commits: int
    today_commits: int
    contribution_data: list[dict[str, Any]]
    synced_at: datetime


class SyncedStats(CamelModel):
    """キャッシュ付き同期で返す統計値。"""

    username: Optional[str] = None
    streak: int = 0
    total_commits: int = 0
    today_commits: int = 0
    synced_at: Optional[datetime] = None


class CachedSyncResponse(CamelModel):
    """キャッシュ付き同期レスポンス。"""

    success: bool = True
    cached: bool
    message: str
    data: SyncedStats
