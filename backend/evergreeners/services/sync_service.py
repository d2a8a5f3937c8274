"""GitHub同期サービス。

保存済みアクセストークンでGitHubからプロフィールとコントリビューションを取得し、
ストリーク等を計算してユーザーレコードに書き込む。
失敗は例外として伝播させず、SyncResult として返す。
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evergreeners.core.exceptions import (
    BadRequestError,
    ExternalAPIError,
    GitHubSyncError,
    NotFoundError,
)
from evergreeners.core.security import decrypt_token
from evergreeners.external.github_client import GitHubClient
from evergreeners.models import GITHUB_PROVIDER_ID, Account, User
from evergreeners.services.streak import calculate_streak_stats

logger = logging.getLogger(__name__)


class SyncFailureReason(str, enum.Enum):
    """同期失敗の理由。"""

    USER_NOT_FOUND = "user_not_found"
    NO_GITHUB_ACCOUNT = "no_github_account"
    TOKEN_UNREADABLE = "token_unreadable"
    UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class GitHubStats:
    """同期で得られたGitHub統計。"""

    username: str
    total_commits: int
    today_commits: int
    current_streak: int
    longest_streak: int
    contribution_data: list[dict[str, Any]] = field(default_factory=list)
    synced_at: Optional[datetime] = None


@dataclass(frozen=True)
class SyncResult:
    """1ユーザー分の同期結果。

    成功時は ``stats``、失敗時は ``failure`` と ``detail`` を持つ。
    """

    user_id: str
    stats: Optional[GitHubStats] = None
    failure: Optional[SyncFailureReason] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, user_id: str, stats: GitHubStats) -> SyncResult:
        return cls(user_id=user_id, stats=stats)

    @classmethod
    def failed(
        cls,
        user_id: str,
        failure: SyncFailureReason,
        detail: str,
    ) -> SyncResult:
        return cls(user_id=user_id, failure=failure, detail=detail)

    def raise_for_failure(self) -> GitHubStats:
        """失敗していればHTTP向けの例外を送出し、成功なら統計を返す。

        Raises:
            NotFoundError: ユーザーが存在しない場合。
            BadRequestError: GitHubアカウントが未連携の場合。
            GitHubSyncError: トークン復号またはGitHub APIが失敗した場合。
        """
        if self.failure is SyncFailureReason.USER_NOT_FOUND:
            raise NotFoundError(detail="User not found")
        if self.failure is SyncFailureReason.NO_GITHUB_ACCOUNT:
            raise BadRequestError(detail="No connected GitHub account found.")
        if self.failure is not None or self.stats is None:
            raise GitHubSyncError()
        return self.stats


def is_sync_needed(
    last_synced_at: Optional[datetime],
    window_minutes: int = 60,
    now: Optional[datetime] = None,
) -> bool:
    """前回同期からキャッシュ期間を過ぎているか判定する。

    Args:
        last_synced_at: 前回同期日時。未同期ならNone。
        window_minutes: キャッシュ有効期間（分）。
        now: 基準日時。省略時は現在時刻（UTC）。

    Returns:
        未同期、または経過時間が期間を超えていればTrue。
    """
    if last_synced_at is None:
        return True
    if now is None:
        now = datetime.now(timezone.utc)
    if last_synced_at.tzinfo is None:
        last_synced_at = last_synced_at.replace(tzinfo=timezone.utc)
    return now - last_synced_at > timedelta(minutes=window_minutes)


class SyncService:
    """GitHub同期サービス。"""

    def __init__(self, session: AsyncSession) -> None:
        """SyncServiceを初期化する。

        Args:
            session: 非同期データベースセッション。
        """
        self.session = session

    async def get_github_account(self, user_id: str) -> Optional[Account]:
        """ユーザーに紐づくGitHubアカウントを取得する。"""
        stmt = (
            select(Account)
            .where(
                Account.user_id == user_id,
                Account.provider_id == GITHUB_PROVIDER_ID,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def sync_user(self, user_id: str) -> SyncResult:
        """1ユーザーのGitHub統計を同期する。

        1. ユーザーとGitHubアカウントを取得
        2. アクセストークンを復号
        3. /user でログイン名を取得し、コントリビューションを取得
        4. ストリーク等を計算してユーザーレコードを更新

        いずれかの段階で失敗した場合はレコードを変更せず、
        ログを出して失敗結果を返す。

        Args:
            user_id: 同期対象のユーザーID。

        Returns:
            SyncResult。
        """
        user = await self.session.get(User, user_id)
        if user is None:
            logger.warning("Sync skipped, user %s not found", user_id)
            return SyncResult.failed(
                user_id, SyncFailureReason.USER_NOT_FOUND, "User not found"
            )

        account = await self.get_github_account(user_id)
        if account is None or not account.access_token:
            logger.info("User %s: No GitHub account connected", user_id)
            return SyncResult.failed(
                user_id,
                SyncFailureReason.NO_GITHUB_ACCOUNT,
                "No connected GitHub account found",
            )

        try:
            token = decrypt_token(account.access_token)
        except (InvalidTag, ValueError) as e:
            logger.error("Failed to decrypt GitHub token for user %s: %s", user_id, e)
            return SyncResult.failed(
                user_id,
                SyncFailureReason.TOKEN_UNREADABLE,
                "Stored GitHub token could not be decrypted",
            )

        client = GitHubClient(token=token)
        try:
            github_user = await client.get_authenticated_user()
            login = github_user["login"]
            calendar = await client.get_contribution_calendar(login)
        except ExternalAPIError as e:
            logger.error("Failed to sync GitHub data for user %s: %s", user_id, e.detail)
            return SyncResult.failed(
                user_id, SyncFailureReason.UPSTREAM_ERROR, e.detail
            )
        finally:
            await client.close()

        now = datetime.now(timezone.utc)
        stats = calculate_streak_stats(calendar.days, now.date(), calendar.total)
        contribution_data = [day.to_json() for day in calendar.days]

        # github_synced_at は単調増加を保つ
        synced_at = now
        previous = user.github_synced_at
        if previous is not None:
            if previous.tzinfo is None:
                previous = previous.replace(tzinfo=timezone.utc)
            synced_at = max(now, previous)

        user.github_username = login
        user.github_streak = stats.current_streak
        user.github_total_commits = stats.total_contributions
        user.github_today_commits = stats.today_count
        user.github_contribution_data = contribution_data
        user.github_synced_at = synced_at
        user.is_github_connected = True
        user.updated_at = now
        self.session.add(user)
        await self.session.flush()

        logger.info(
            "Synced GitHub data for user %s (%s): %d commits, %d day streak",
            user_id,
            login,
            stats.total_contributions,
            stats.current_streak,
        )

        return SyncResult.success(
            user_id,
            GitHubStats(
                username=login,
                total_commits=stats.total_contributions,
                today_commits=stats.today_count,
                current_streak=stats.current_streak,
                longest_streak=stats.longest_streak,
                contribution_data=contribution_data,
                synced_at=synced_at,
            ),
        )
