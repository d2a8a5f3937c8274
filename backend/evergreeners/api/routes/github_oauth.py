"""GitHub OAuth連携エンドポイント。

ログイン済みユーザーのGitHubアカウントを連携するための
認可画面へのリダイレクトとコールバック処理を提供する。
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from evergreeners.api.deps import get_current_user, get_session
from evergreeners.core.exceptions import BadRequestError
from evergreeners.external.github_client import GitHubClient, exchange_code_for_token
from evergreeners.models import User
from evergreeners.services.oauth_service import (
    build_authorize_url,
    build_return_url,
    decode_oauth_state,
    encode_oauth_state,
    link_github_account,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/authorize",
    summary="GitHub認可画面へリダイレクト",
    response_class=RedirectResponse,
    status_code=302,
)
async def authorize(
    return_to: str = Query(default="/", alias="returnTo"),
    scroll_y: Optional[int] = Query(default=None, alias="scrollY"),
    current_user: User = Depends(get_current_user),
) -> RedirectResponse:
    """戻り先を ``state`` に詰めてGitHubの認可画面へリダイレクトする。

    Args:
        return_to: 連携完了後に戻る相対パス。
        scroll_y: 戻り先で復元するスクロール位置。
        current_user: 認証済みユーザー。

    Returns:
        GitHub認可URLへのリダイレクト。
    """
    state = encode_oauth_state(return_to, scroll_y)
    logger.info("Starting GitHub OAuth linking for user %s", current_user.id)
    return RedirectResponse(build_authorize_url(state), status_code=302)


@router.get(
    "/callback",
    summary="GitHub OAuthコールバック",
    response_class=RedirectResponse,
    status_code=302,
)
async def callback(
    code: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> RedirectResponse:
    """認可コードをトークンに交換し、GitHubアカウントを連携する。

    1. 認可コードをアクセストークンに交換
    2. /user でGitHubユーザー情報を取得
    3. accounts を作成または更新（1ユーザー1件）
    4. ``state`` の戻り先へリダイレクト

    Args:
        code: GitHubから受け取った認可コード。
        state: 戻り先を含む ``state``。
        session: データベースセッション。
        current_user: 認証済みユーザー。

    Returns:
        フロントエンドへのリダイレクト。

    Raises:
        BadRequestError: 認可コードが無い場合。
        ExternalAPIError: トークン交換またはユーザー取得に失敗した場合。
    """
    if not code:
        raise BadRequestError(detail="Missing code")

    token_data = await exchange_code_for_token(code)
    access_token = token_data["access_token"]

    async with GitHubClient(token=access_token) as client:
        github_user = await client.get_authenticated_user()

    await link_github_account(
        session,
        current_user,
        github_user,
        access_token,
        scope=token_data.get("scope"),
    )

    return RedirectResponse(build_return_url(decode_oauth_state(state)), status_code=302)
