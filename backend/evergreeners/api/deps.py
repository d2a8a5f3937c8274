"""FastAPI依存性注入モジュール。

セッショントークン（Cookieまたは Bearer ヘッダー）から現在のユーザーを取得する。
データベースセッションは ``evergreeners.database.get_session`` を再利用する。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evergreeners.config import settings
from evergreeners.core.exceptions import AuthenticationError, NotFoundError
from evergreeners.database import get_session  # noqa: F401 – re-export for convenience
from evergreeners.models import AuthSession, User

# ---------------------------------------------------------------------------
# セッショントークンの取得元
# ---------------------------------------------------------------------------
session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# 現在のユーザー取得
# ---------------------------------------------------------------------------

async def get_current_user_id(
    cookie_token: Optional[str] = Depends(session_cookie),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> str:
    """有効なログインセッションからユーザーIDを取得する。

    Args:
        cookie_token: セッションCookieの値。
        credentials: Authorizationヘッダーの Bearer トークン。
        session: データベースセッション。

    Returns:
        セッションに紐づくユーザーID。

    Raises:
        AuthenticationError: トークンが無い、未知、または期限切れの場合。
    """
    token = cookie_token or (credentials.credentials if credentials else None)
    if not token:
        raise AuthenticationError("Unauthorized")

    stmt = select(AuthSession.user_id).where(
        AuthSession.token == token,
        AuthSession.expires_at > datetime.now(timezone.utc),
    )
    result = await session.execute(stmt)
    user_id = result.scalar_one_or_none()

    if user_id is None:
        raise AuthenticationError("Unauthorized")

    return user_id


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> User:
    """セッションのユーザーIDからUserを取得する。

    Args:
        user_id: 認証済みユーザーID。
        session: データベースセッション。

    Returns:
        Userオブジェクト。

    Raises:
        NotFoundError: ユーザーが存在しない場合。
    """
    stmt = select(User).where(User.id == user_id)
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None:
        raise NotFoundError(detail="User not found")

    return user
