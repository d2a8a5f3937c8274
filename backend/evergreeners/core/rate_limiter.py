"""GitHub APIレート制限管理モジュール。

レスポンスヘッダー（X-RateLimit-Remaining / X-RateLimit-Reset）を記録し、
残数が尽きている間はリセット時刻まで次のリクエストを待機させる。
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Optional

logger = logging.getLogger(__name__)


class GitHubRateLimiter:
    """GitHub APIのヘッダーベースレート制限。"""

    def __init__(self) -> None:
        self._remaining: Optional[int] = None
        self._reset: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def remaining(self) -> Optional[int]:
        """最後に観測した残りリクエスト数。"""
        return self._remaining

    async def acquire(self) -> None:
        """GitHub APIリクエスト前に呼び出し、レート制限を遵守する。

        残りリクエスト数が0の場合、リセット時刻まで非同期で待機する。
        ヘッダー情報が未設定の場合は即座に通過する。
        """
        async with self._lock:
            if self._remaining is not None and self._remaining <= 0:
                if self._reset is not None:
                    wait_time = self._reset - time.time()
                    if wait_time > 0:
                        logger.warning(
                            "GitHub rate limit exhausted, waiting %.0fs for reset",
                            wait_time,
                        )
                        await asyncio.sleep(wait_time)
                self._remaining = None
                self._reset = None

    def update(self, headers: Mapping[str, str]) -> None:
        """レスポンスヘッダーからレート制限情報を更新する。

        Args:
            headers: HTTPレスポンスヘッダー。httpx.Headers のような
                大文字小文字を区別しないマッピングを想定する。
        """
        remaining = headers.get("X-RateLimit-Remaining")
        reset = headers.get("X-RateLimit-Reset")

        if remaining is not None:
            self._remaining = int(remaining)
        if reset is not None:
            self._reset = float(reset)

    def reset(self) -> None:
        """記録済みの制限状態を破棄する。"""
        self._remaining = None
        self._reset = None


# ---------------------------------------------------------------------------
# シングルトン
# ---------------------------------------------------------------------------

_rate_limiter: Optional[GitHubRateLimiter] = None


def get_rate_limiter() -> GitHubRateLimiter:
    """GitHubRateLimiterのシングルトンインスタンスを取得する。

    Returns:
        GitHubRateLimiterインスタンス。
    """
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = GitHubRateLimiter()
    return _rate_limiter
