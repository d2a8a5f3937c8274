"""Tests for the ``/api/user`` endpoints."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient

from evergreeners.models import User
from evergreeners.services.sync_service import GitHubStats, SyncFailureReason, SyncResult
from tests.conftest import TEST_GITHUB_LOGIN, TEST_USER_ID, make_result, setup_auth

ANONYMOUS_NAME_RE = re.compile(
    r"^(Hidden|Secret|Silent|Quiet|Mysterious)(Tree|Leaf|Sprout|Root|Seed)\d{1,3}$"
)


def _patched_sync(result: SyncResult):
    service = MagicMock()
    service.sync_user = AsyncMock(return_value=result)
    return patch("evergreeners.api.routes.user.SyncService", return_value=service)


def _stats() -> GitHubStats:
    return GitHubStats(
        username=TEST_GITHUB_LOGIN,
        total_commits=120,
        today_commits=3,
        current_streak=5,
        longest_streak=12,
        contribution_data=[{"date": "2026-10-18", "contributionCount": 3}],
        synced_at=datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc),
    )


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
    ) -> None:
        resp = await async_client.get("/api/user/profile")

        assert resp.status_code == 401
        assert resp.json() == {"detail": "Unauthorized"}
        mock_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_or_expired_session(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        auth_headers: dict[str, str],
    ) -> None:
        mock_session.execute.side_effect = [make_result(None)]

        resp = await async_client.get("/api/user/profile", headers=auth_headers)

        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_session_cookie_is_accepted(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
    ) -> None:
        setup_auth(mock_session, test_user)
        async_client.cookies.set("evergreeners.session_token", "cookie-token")

        resp = await async_client.get("/api/user/profile")

        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_session_for_deleted_user(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        auth_headers: dict[str, str],
    ) -> None:
        mock_session.execute.side_effect = [make_result(TEST_USER_ID), make_result(None)]

        resp = await async_client.get("/api/user/profile", headers=auth_headers)

        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# POST /api/user/sync-github
# ---------------------------------------------------------------------------


class TestSyncGitHub:
    @pytest.mark.asyncio
    async def test_success(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)

        with _patched_sync(SyncResult.success(TEST_USER_ID, _stats())) as MockService:
            resp = await async_client.post("/api/user/sync-github", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["username"] == TEST_GITHUB_LOGIN
        assert body["streak"] == 5
        assert body["longestStreak"] == 12
        assert body["totalCommits"] == 120
        assert body["todayCommits"] == 3
        assert body["contributionData"] == [{"date": "2026-10-18", "contributionCount": 3}]
        assert body["syncedAt"].startswith("2026-10-18T09:00:00")
        MockService.return_value.sync_user.assert_awaited_once_with(TEST_USER_ID)

    @pytest.mark.asyncio
    async def test_no_github_account(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)
        failed = SyncResult.failed(
            TEST_USER_ID, SyncFailureReason.NO_GITHUB_ACCOUNT, "none"
        )

        with _patched_sync(failed):
            resp = await async_client.post("/api/user/sync-github", headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json() == {"detail": "No connected GitHub account found."}

    @pytest.mark.asyncio
    async def test_upstream_failure(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)
        failed = SyncResult.failed(
            TEST_USER_ID, SyncFailureReason.UPSTREAM_ERROR, "GitHub API error 502"
        )

        with _patched_sync(failed):
            resp = await async_client.post("/api/user/sync-github", headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Failed to sync with GitHub"}

    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client: AsyncClient) -> None:
        resp = await async_client.post("/api/user/sync-github")
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# POST /api/user/sync-github-cached
# ---------------------------------------------------------------------------


class TestSyncGitHubCached:
    @pytest.mark.asyncio
    async def test_recent_sync_returns_stored_stats(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        test_user.github_username = TEST_GITHUB_LOGIN
        test_user.github_streak = 4
        test_user.github_total_commits = 80
        test_user.github_today_commits = 1
        test_user.github_synced_at = datetime.now(timezone.utc) - timedelta(minutes=5)
        setup_auth(mock_session, test_user)

        with _patched_sync(SyncResult.success(TEST_USER_ID, _stats())) as MockService:
            resp = await async_client.post(
                "/api/user/sync-github-cached", headers=auth_headers
            )

        assert resp.status_code == 200
        body = resp.json()
        assert body["cached"] is True
        assert body["message"] == "Using cached data"
        assert body["data"]["username"] == TEST_GITHUB_LOGIN
        assert body["data"]["streak"] == 4
        assert body["data"]["totalCommits"] == 80
        assert body["data"]["todayCommits"] == 1
        MockService.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_data_triggers_sync(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        test_user.github_synced_at = datetime.now(timezone.utc) - timedelta(hours=2)
        setup_auth(mock_session, test_user)

        with _patched_sync(SyncResult.success(TEST_USER_ID, _stats())) as MockService:
            resp = await async_client.post(
                "/api/user/sync-github-cached", headers=auth_headers
            )

        assert resp.status_code == 200
        body = resp.json()
        assert body["cached"] is False
        assert body["data"]["streak"] == 5
        assert body["data"]["totalCommits"] == 120
        MockService.return_value.sync_user.assert_awaited_once_with(TEST_USER_ID)

    @pytest.mark.asyncio
    async def test_never_synced_without_account(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)
        failed = SyncResult.failed(
            TEST_USER_ID, SyncFailureReason.NO_GITHUB_ACCOUNT, "none"
        )

        with _patched_sync(failed):
            resp = await async_client.post(
                "/api/user/sync-github-cached", headers=auth_headers
            )

        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# GET / PUT /api/user/profile
# ---------------------------------------------------------------------------


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_profile_uses_camel_case(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)

        resp = await async_client.get("/api/user/profile", headers=auth_headers)

        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user["id"] == TEST_USER_ID
        assert user["isPublic"] is True
        assert user["isGithubConnected"] is False
        assert user["githubStreak"] == 0
        assert "is_public" not in user

    @pytest.mark.asyncio
    async def test_partial_update_leaves_other_fields(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        test_user.bio = "Gardening commits"
        setup_auth(mock_session, test_user)

        resp = await async_client.put(
            "/api/user/profile",
            headers=auth_headers,
            json={"name": "New Name", "location": None},
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Profile updated successfully",
            "anonymousName": None,
        }
        assert test_user.name == "New Name"
        assert test_user.location is None
        assert test_user.bio == "Gardening commits"
        mock_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_going_private_generates_anonymous_name(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)

        resp = await async_client.put(
            "/api/user/profile", headers=auth_headers, json={"isPublic": False}
        )

        assert resp.status_code == 200
        name = resp.json()["anonymousName"]
        assert ANONYMOUS_NAME_RE.match(name)
        assert test_user.is_public is False
        assert test_user.anonymous_name == name

    @pytest.mark.asyncio
    async def test_going_private_keeps_existing_anonymous_name(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        test_user.anonymous_name = "QuietSeed7"
        setup_auth(mock_session, test_user)

        resp = await async_client.put(
            "/api/user/profile", headers=auth_headers, json={"isPublic": False}
        )

        assert resp.status_code == 200
        assert resp.json()["anonymousName"] is None
        assert test_user.anonymous_name == "QuietSeed7"

    @pytest.mark.asyncio
    async def test_rejects_null_visibility(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)

        resp = await async_client.put(
            "/api/user/profile", headers=auth_headers, json={"isPublic": None}
        )

        assert resp.status_code == 422
        assert test_user.is_public is True
        mock_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_wrong_type(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)

        resp = await async_client.put(
            "/api/user/profile", headers=auth_headers, json={"isPublic": "maybe"}
        )

        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/user/analytics
# ---------------------------------------------------------------------------


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_summarises_stored_calendar(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        today = datetime.now(timezone.utc).date()
        test_user.github_streak = 2
        test_user.github_total_commits = 6
        test_user.github_today_commits = 4
        test_user.github_contribution_data = [
            {"date": today.isoformat(), "contributionCount": 4},
            {"date": (today - timedelta(days=1)).isoformat(), "contributionCount": 2},
            {"date": (today - timedelta(days=2)).isoformat(), "contributionCount": 0},
        ]
        setup_auth(mock_session, test_user)

        resp = await async_client.get("/api/user/analytics", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["totalCommits"] == 6
        assert body["currentStreak"] == 2
        assert body["longestStreak"] == 2
        assert body["activeDays"] == 2
        assert len(body["weekly"]) == 7
        assert sum(d["commits"] for d in body["weekly"]) == 6
        assert len(body["monthly"]) == 6
        assert body["activity"] == [0, 2, 4]
        assert body["goals"][0]["title"] == "Daily commits"

    @pytest.mark.asyncio
    async def test_unsynced_user(
        self,
        async_client: AsyncClient,
        mock_session: AsyncMock,
        test_user: User,
        auth_headers: dict[str, str],
    ) -> None:
        setup_auth(mock_session, test_user)

        resp = await async_client.get("/api/user/analytics", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["activity"] == []
        assert body["longestStreak"] == 0
        assert all(m["commits"] == 0 for m in body["monthly"])
