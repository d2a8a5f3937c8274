"""GitHub OAuth連携サービス。

OAuth ``state`` パラメータ（リダイレクト先とスクロール位置を
base64エンコードしたJSON）の生成・解析と、GitHubアカウントの
連携（検索してから作成または更新）を提供する。
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evergreeners.config import settings
from evergreeners.core.security import encrypt_token
from evergreeners.external.github_client import OAUTH_AUTHORIZE_URL
from evergreeners.models import GITHUB_PROVIDER_ID, Account, User

logger = logging.getLogger(__name__)

DEFAULT_RETURN_PATH = "/"


@dataclass(frozen=True)
class OAuthState:
    """OAuth完了後の戻り先。"""

    return_to: str = DEFAULT_RETURN_PATH
    scroll_y: Optional[int] = None


def _is_relative_path(path: Any) -> bool:
    return (
        isinstance(path, str)
        and path.startswith("/")
        and not path.startswith("//")
        and "\\" not in path
    )


def encode_oauth_state(return_to: str, scroll_y: Optional[int] = None) -> str:
    """戻り先をbase64エンコードしたJSONに変換する。

    Args:
        return_to: 連携完了後に戻る相対パス。
        scroll_y: 戻り先で復元するスクロール位置。

    Returns:
        ``state`` パラメータ用の文字列。
    """
    payload: dict[str, Any] = {
        "returnTo": return_to if _is_relative_path(return_to) else DEFAULT_RETURN_PATH,
    }
    if scroll_y is not None:
        payload["scrollY"] = scroll_y
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_oauth_state(state: Optional[str]) -> OAuthState:
    """``state`` パラメータを解析する。

    解析できない場合や戻り先が相対パスでない場合は ``/`` に戻す。
    標準base64とURLセーフbase64のどちらも受け付ける。

    Args:
        state: OAuthコールバックで受け取った ``state``。

    Returns:
        OAuthState。
    """
    if not state:
        return OAuthState()

    normalized = state.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        payload = json.loads(base64.b64decode(normalized, validate=True))
    except (binascii.Error, ValueError):
        logger.warning("Ignoring undecodable OAuth state")
        return OAuthState()

    if not isinstance(payload, dict):
        return OAuthState()

    return_to = payload.get("returnTo")
    if not _is_relative_path(return_to):
        return_to = DEFAULT_RETURN_PATH

    scroll_y = payload.get("scrollY")
    if isinstance(scroll_y, bool) or not isinstance(scroll_y, (int, float)):
        scroll_y = None
    elif isinstance(scroll_y, float) and not math.isfinite(scroll_y):
        # json.loads は Infinity / NaN を受け付ける
        scroll_y = None

    return OAuthState(
        return_to=return_to,
        scroll_y=int(scroll_y) if scroll_y is not None else None,
    )


def build_authorize_url(state: str) -> str:
    """GitHubの認可画面URLを組み立てる。"""
    params = {
        "client_id": settings.GITHUB_CLIENT_ID,
        "redirect_uri": settings.GITHUB_OAUTH_CALLBACK_URL,
        "scope": settings.GITHUB_OAUTH_SCOPES,
        "state": state,
        "allow_signup": "true",
    }
    return f"{OAUTH_AUTHORIZE_URL}?{urlencode(params)}"


def build_return_url(state: OAuthState) -> str:
    """連携完了後のフロントエンドURLを組み立てる。"""
    url = settings.FRONTEND_URL.rstrip("/") + state.return_to
    if state.scroll_y is not None:
        separator = "&" if "?" in state.return_to else "?"
        url += f"{separator}{urlencode({'scroll': state.scroll_y})}"
    return url


async def link_github_account(
    session: AsyncSession,
    user: User,
    github_user: dict[str, Any],
    access_token: str,
    scope: Optional[str] = None,
) -> Account:
    """ユーザーのGitHubアカウントを作成または更新する。

    1ユーザーにつきGitHubアカウントは1件まで。既存レコードがあれば
    外部IDとトークンを上書きする。

    Args:
        session: データベースセッション。
        user: 連携するユーザー。
        github_user: GitHub ``/user`` のレスポンス。
        access_token: 平文のアクセストークン（暗号化して保存）。
        scope: 付与されたスコープ。

    Returns:
        作成または更新したAccount。
    """
    stmt = (
        select(Account)
        .where(
            Account.user_id == user.id,
            Account.provider_id == GITHUB_PROVIDER_ID,
        )
        .limit(1)
    )
    result = await session.execute(stmt)
    account = result.scalar_one_or_none()

    encrypted = encrypt_token(access_token)
    github_id = str(github_user["id"])

    if account is None:
        account = Account(
            user_id=user.id,
            provider_id=GITHUB_PROVIDER_ID,
            account_id=github_id,
            access_token=encrypted,
            scope=scope,
        )
        session.add(account)
        logger.info("Linked GitHub account %s to user %s", github_id, user.id)
    else:
        account.account_id = github_id
        account.access_token = encrypted
        account.scope = scope
        session.add(account)
        logger.info("Updated GitHub account %s for user %s", github_id, user.id)

    user.github_username = github_user.get("login")
    user.is_github_connected = True
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    await session.flush()

    return account
