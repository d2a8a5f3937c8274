"""ユーザーエンドポイント。

GitHub同期（強制・キャッシュ付き）、プロフィールの取得・更新、
アナリティクス集計のAPIを提供する。
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from evergreeners.api.deps import get_current_user, get_session
from evergreeners.config import settings
from evergreeners.models import User
from evergreeners.schemas.analytics import AnalyticsResponse
from evergreeners.schemas.sync import CachedSyncResponse, GitHubSyncResponse, SyncedStats
from evergreeners.schemas.user import (
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UserProfile,
)
from evergreeners.services.analytics_service import build_analytics
from evergreeners.services.profile_service import apply_profile_update
from evergreeners.services.sync_service import SyncService, is_sync_needed

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/sync-github",
    response_model=GitHubSyncResponse,
    summary="GitHub強制同期",
)
async def sync_github(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> GitHubSyncResponse:
    """GitHubから最新の統計を取得して保存する。

    Args:
        session: データベースセッション。
        current_user: 認証済みユーザー。

    Returns:
        同期後の統計とコントリビューションカレンダー。

    Raises:
        BadRequestError: GitHubアカウントが未連携の場合。
        GitHubSyncError: GitHub APIが失敗した場合。
    """
    result = await SyncService(session=session).sync_user(current_user.id)
    stats = result.raise_for_failure()

    return GitHubSyncResponse(
        username=stats.username,
        streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        total_commits=stats.total_commits,
        today_commits=stats.today_commits,
        contribution_data=stats.contribution_data,
        synced_at=stats.synced_at or datetime.now(timezone.utc),
    )


@router.post(
    "/sync-github-cached",
    response_model=CachedSyncResponse,
    summary="GitHub同期（キャッシュ付き）",
)
async def sync_github_cached(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CachedSyncResponse:
    """前回同期が SYNC_CACHE_MINUTES 以内なら保存済みの統計を返す。

    期間を過ぎていれば同期を実行して最新の統計を返す。

    Args:
        session: データベースセッション。
        current_user: 認証済みユーザー。

    Returns:
        ``cached`` フラグ付きの統計。
    """
    if not is_sync_needed(current_user.github_synced_at, settings.SYNC_CACHE_MINUTES):
        return CachedSyncResponse(
            cached=True,
            message="Using cached data",
            data=SyncedStats(
                username=current_user.github_username,
                streak=current_user.github_streak or 0,
                total_commits=current_user.github_total_commits or 0,
                today_commits=current_user.github_today_commits or 0,
                synced_at=current_user.github_synced_at,
            ),
        )

    result = await SyncService(session=session).sync_user(current_user.id)
    stats = result.raise_for_failure()

    return CachedSyncResponse(
        cached=False,
        message="Synced fresh data",
        data=SyncedStats(
            username=stats.username,
            streak=stats.current_streak,
            total_commits=stats.total_commits,
            today_commits=stats.today_commits,
            synced_at=stats.synced_at,
        ),
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="プロフィール取得",
)
async def get_profile(
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    """現在のユーザーのプロフィール全項目を返す。"""
    return ProfileResponse(user=UserProfile.model_validate(current_user))


@router.put(
    "/profile",
    response_model=ProfileUpdateResponse,
    summary="プロフィール更新",
)
async def update_profile(
    request: ProfileUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ProfileUpdateResponse:
    """送信されたフィールドのみプロフィールを更新する。

    非公開に切り替えた際、匿名名が無ければ自動生成する。

    Args:
        request: プロフィール部分更新リクエスト。
        session: データベースセッション。
        current_user: 認証済みユーザー。

    Returns:
        更新結果と、今回設定された匿名名。
    """
    anonymous_name = apply_profile_update(current_user, request)
    session.add(current_user)
    await session.flush()

    logger.info("Profile updated for user %s", current_user.id)

    return ProfileUpdateResponse(anonymous_name=anonymous_name)


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="アナリティクス集計",
)
async def get_analytics(
    current_user: User = Depends(get_current_user),
) -> AnalyticsResponse:
    """保存済みのコントリビューションカレンダーを集計して返す。"""
    return build_analytics(current_user, datetime.now(timezone.utc).date())
