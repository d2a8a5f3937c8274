"""GitHub API 非同期クライアント。

httpx.AsyncClient を使用し、認証ユーザー取得（REST）、
コントリビューションカレンダー取得（GraphQL）、
OAuth認可コードのトークン交換を提供する。
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from evergreeners.config import settings
from evergreeners.core.exceptions import ExternalAPIError, GitHubRateLimitError
from evergreeners.core.rate_limiter import get_rate_limiter
from evergreeners.schemas.contribution import ContributionCalendar, ContributionDay

logger = logging.getLogger(__name__)

USER_AGENT = "Evergreeners-App"
OAUTH_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
OAUTH_TOKEN_URL = "https://github.com/login/oauth/access_token"

CONTRIBUTIONS_QUERY = """
query($username: String!) {
    user(login: $username) {
        contributionsCollection {
            contributionCalendar {
                totalContributions
                weeks {
                    contributionDays {
                        contributionCount
                        date
                    }
                }
            }
        }
    }
}
"""


class GitHubClient:
    """GitHub REST / GraphQL 非同期クライアント。

    Attributes:
        BASE_URL: GitHub API のベースURL。
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """GitHubClientを初期化する。

        Args:
            token: GitHub OAuthアクセストークン。
            transport: テスト等で差し替えるhttpxトランスポート。
        """
        self._rate_limiter = get_rate_limiter()
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=httpx.Timeout(30.0, connect=10.0),
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Public API Methods
    # ------------------------------------------------------------------

    async def get_authenticated_user(self) -> dict[str, Any]:
        """認証済みユーザー情報を取得する。

        Returns:
            ユーザー情報辞書（login, id, name など）。

        Raises:
            ExternalAPIError: API呼び出しに失敗した場合。
        """
        response = await self._request("GET", "/user")
        data = _decode_json(response, "user")
        if not isinstance(data, dict) or not data.get("login"):
            raise ExternalAPIError(detail="GitHub user response is missing login")
        return data

    async def get_contribution_calendar(self, login: str) -> ContributionCalendar:
        """GraphQLでコントリビューションカレンダーを取得する。

        週ごとの日別データを平坦化し、新しい日付が先頭になるよう反転する。

        Args:
            login: GitHubログイン名。

        Returns:
            ContributionCalendar。

        Raises:
            ExternalAPIError: HTTPエラー、GraphQLエラー、不正なレスポンスの場合。
        """
        response = await self._request(
            "POST",
            "/graphql",
            json={"query": CONTRIBUTIONS_QUERY, "variables": {"username": login}},
        )
        payload = _decode_json(response, "contribution")

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = (
                first.get("message", "unknown error")
                if isinstance(first, dict)
                else str(first)
            )
            logger.warning("GitHub GraphQL error for %s: %s", login, message)
            raise ExternalAPIError(detail=f"GitHub GraphQL error: {message}")

        try:
            calendar = payload["data"]["user"]["contributionsCollection"][
                "contributionCalendar"
            ]
            days = [
                ContributionDay.model_validate(day)
                for week in calendar["weeks"]
                for day in week["contributionDays"]
            ]
            total = int(calendar["totalContributions"])
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ExternalAPIError(
                detail=f"Malformed GitHub contribution payload: {e}"
            )

        days.reverse()
        return ContributionCalendar(total=total, days=days)

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """共通HTTPリクエストメソッド。

        レート制限の待機、レスポンスヘッダーからのレート制限情報更新、
        エラーハンドリングを行う。

        Raises:
            GitHubRateLimitError: レート制限超過時。
            ExternalAPIError: その他のAPIエラー時。
        """
        await self._rate_limiter.acquire()

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("GitHub API request failed: %s %s - %s", method, url, str(e))
            raise ExternalAPIError(detail=f"GitHub API request failed: {e}")

        self._rate_limiter.update(response.headers)

        if response.status_code == 403:
            remaining = response.headers.get("X-RateLimit-Remaining")
            if remaining is not None and int(remaining) == 0:
                reset_at = response.headers.get("X-RateLimit-Reset", "unknown")
                raise GitHubRateLimitError(
                    detail=f"GitHub API rate limit exceeded. Resets at: {reset_at}"
                )
            raise ExternalAPIError(
                detail=f"GitHub API forbidden: {response.text[:200]}"
            )

        if response.status_code >= 400:
            raise ExternalAPIError(
                detail=(
                    f"GitHub API error {response.status_code}: "
                    f"{response.text[:200]}"
                )
            )

        return response

    async def close(self) -> None:
        """HTTPクライアントセッションを閉じる。"""
        await self._client.aclose()
        logger.debug("GitHubClient session closed")

    async def __aenter__(self) -> GitHubClient:
        """async with 構文のサポート。"""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """async with 構文のサポート。"""
        await self.close()


def _decode_json(response: httpx.Response, what: str) -> Any:
    """レスポンス本文をJSONとして読み込む。

    Raises:
        ExternalAPIError: 本文がJSONでない場合。
    """
    try:
        return response.json()
    except ValueError as e:
        logger.warning("GitHub returned a non-JSON %s response: %s", what, e)
        raise ExternalAPIError(detail=f"Malformed GitHub {what} payload")


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------

async def exchange_code_for_token(
    code: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, Any]:
    """OAuth認可コードをアクセストークンに交換する。

    Args:
        code: GitHubから受け取った認可コード。
        transport: テスト等で差し替えるhttpxトランスポート。

    Returns:
        ``access_token``, ``token_type``, ``scope`` を含む辞書。

    Raises:
        ExternalAPIError: 交換に失敗した場合。
    """
    data = {
        "client_id": settings.GITHUB_CLIENT_ID,
        "client_secret": settings.GITHUB_CLIENT_SECRET,
        "code": code,
        "redirect_uri": settings.GITHUB_OAUTH_CALLBACK_URL,
    }

    async with httpx.AsyncClient(
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        timeout=httpx.Timeout(30.0, connect=10.0),
        transport=transport,
    ) as client:
        try:
            response = await client.post(OAUTH_TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            logger.error("GitHub token exchange failed: %s", str(e))
            raise ExternalAPIError(detail=f"GitHub token exchange failed: {e}")

    if response.status_code >= 400:
        raise ExternalAPIError(
            detail=f"GitHub token exchange error {response.status_code}"
        )

    token_data = _decode_json(response, "token exchange")
    if not isinstance(token_data, dict):
        raise ExternalAPIError(detail="Malformed GitHub token exchange payload")
    # GitHubはエラー時も200で {"error": ..., "error_description": ...} を返す
    if token_data.get("error") or not token_data.get("access_token"):
        description = token_data.get("error_description") or token_data.get(
            "error", "no access_token in response"
        )
        raise ExternalAPIError(detail=f"GitHub token exchange failed: {description}")

    return token_data
