"""認証サービスへのパススルー。

``/api/auth/*`` へのリクエストを本文を解釈せずに外部認証サービスへ転送し、
レスポンスをそのまま返す。CORSヘッダーはアプリの CORSMiddleware が付与する。
"""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Request, Response

from evergreeners.config import settings
from evergreeners.core.exceptions import ExternalAPIError

logger = logging.getLogger(__name__)

router = APIRouter()

# 転送しないヘッダー（hop-by-hop、および再計算されるもの）
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)


def _auth_client() -> httpx.AsyncClient:
    """認証サービス向けのHTTPクライアントを生成する。"""
    return httpx.AsyncClient(
        base_url=settings.AUTH_SERVICE_URL,
        timeout=httpx.Timeout(30.0, connect=10.0),
    )


def _forwardable_request_headers(request: Request) -> list[tuple[str, str]]:
    return [
        (key, value)
        for key, value in request.headers.items()
        if key.lower() not in HOP_BY_HOP_HEADERS
    ]


def _is_relayed_response_header(key: str) -> bool:
    lowered = key.lower()
    return (
        lowered not in HOP_BY_HOP_HEADERS
        and lowered != "content-encoding"
        and not lowered.startswith("access-control-")
    )


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def proxy_auth(path: str, request: Request) -> Response:
    """リクエストを外部認証サービスへそのまま転送する。

    Args:
        path: ``/api/auth/`` 以降のパス。
        request: 受信したリクエスト。

    Returns:
        認証サービスのレスポンス（Set-Cookieはすべて保持）。

    Raises:
        ExternalAPIError: 認証サービスに到達できない場合。
    """
    body = await request.body()

    async with _auth_client() as client:
        try:
            upstream = await client.request(
                request.method,
                f"/api/auth/{path}",
                params=request.query_params.multi_items(),
                headers=_forwardable_request_headers(request),
                content=body,
            )
        except httpx.HTTPError as e:
            logger.error("Auth service request failed: %s /api/auth/%s - %s", request.method, path, e)
            raise ExternalAPIError(detail="Authentication service unavailable")

    response = Response(content=upstream.content, status_code=upstream.status_code)
    for key, value in upstream.headers.multi_items():
        if _is_relayed_response_header(key):
            response.headers.append(key, value)
    return response
