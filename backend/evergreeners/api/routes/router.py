"""APIルーター集約モジュール。

各ドメインのルーターを統合し、プレフィックスとタグを設定する。
``/auth`` のパススルーは全パスを受けるため、必ず最後に登録する。
"""

from __future__ import annotations

from fastapi import APIRouter

from evergreeners.api.routes.auth import router as auth_proxy_router
from evergreeners.api.routes.github_oauth import router as github_oauth_router
from evergreeners.api.routes.user import router as user_router

router = APIRouter()

router.include_router(
    user_router,
    prefix="/user",
    tags=["user"],
)

router.include_router(
    github_oauth_router,
    prefix="/auth/github",
    tags=["github-oauth"],
)

router.include_router(
    auth_proxy_router,
    prefix="/auth",
    tags=["auth"],
)
