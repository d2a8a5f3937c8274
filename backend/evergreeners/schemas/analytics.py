"""アナリティクス関連のPydanticスキーマ。"""

from __future__ import annotations

from pydantic import Field

from evergreeners.schemas.common import CamelModel


class WeekdayCommits(CamelModel):
    """曜日別コミット数。"""

    day: str = Field(description="曜日（Sun〜Sat）")
    commits: int


class MonthlyCommits(CamelModel):
    """月別コミット数。"""

    month: str = Field(description="月の略称（Jan〜Dec）")
    year: int
    commits: int


class GoalProgress(CamelModel):
    """目標達成度。"""

    title: str
    current: int
    target: int
    percentage: float = Field(ge=0, le=100)


class AnalyticsResponse(CamelModel):
    """アナリティクス画面用の集計レスポンス。"""

    total_commits: int
    today_commits: int
    current_streak: int
    longest_streak: int
    active_days: int
    weekly: list[WeekdayCommits]
    monthly: list[MonthlyCommits]
    activity: list[int] = Field(
        description="日別の強度（0〜4、古い日付が先頭）",
    )
    goals: list[GoalProgress]
