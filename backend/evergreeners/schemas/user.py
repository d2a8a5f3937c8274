"""ユーザープロフィール関連のPydanticスキーマ。"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from evergreeners.schemas.common import CamelModel


class UserProfile(CamelModel):
    """プロフィール全項目（GitHub同期結果を含む）。"""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    is_public: bool = True
    anonymous_name: Optional[str] = None
    github_username: Optional[str] = None
    is_github_connected: bool = False
    github_sync_enabled: bool = True
    github_synced_at: Optional[datetime] = None
    github_streak: int = 0
    github_total_commits: int = 0
    github_today_commits: int = 0
    github_contribution_data: Optional[list[dict[str, Any]]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileResponse(CamelModel):
    """プロフィール取得レスポンス。"""

    user: UserProfile


class ProfileUpdateRequest(CamelModel):
    """プロフィール部分更新リクエスト。

    送信されたフィールドのみ更新する（未送信とnullは区別される）。
    """

    name: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    image: Optional[str] = Field(
        default=None,
        description="画像URLまたはbase64データURI",
    )
    is_public: bool = Field(
        default=True,
        description="公開設定（nullは受け付けない）",
    )
    anonymous_name: Optional[str] = Field(default=None, max_length=255)


class ProfileUpdateResponse(CamelModel):
    """プロフィール更新レスポンス。"""

    success: bool = True
    message: str = "Profile updated successfully"
    anonymous_name: Optional[str] = None
