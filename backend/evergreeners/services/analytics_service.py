"""アナリティクス集計。

ユーザーに保存されたコントリビューションカレンダーから、
曜日別・月別のコミット数、アクティビティグリッド、目標達成度を算出する。
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

from evergreeners.config import settings
from evergreeners.models import User
from evergreeners.schemas.analytics import (
    AnalyticsResponse,
    GoalProgress,
    MonthlyCommits,
    WeekdayCommits,
)
from evergreeners.schemas.contribution import ContributionDay, parse_stored_days
from evergreeners.services.streak import calculate_longest_streak

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
MAX_INTENSITY = 4


def weekday_totals(days: Sequence[ContributionDay]) -> list[WeekdayCommits]:
    """曜日ごとのコミット合計を日曜始まりで返す。"""
    totals = dict.fromkeys(WEEKDAY_NAMES, 0)
    for day in days:
        # date.weekday() は月曜=0 のため日曜始まりへずらす
        totals[WEEKDAY_NAMES[(day.date.weekday() + 1) % 7]] += day.count
    return [WeekdayCommits(day=name, commits=totals[name]) for name in WEEKDAY_NAMES]


def monthly_totals(
    days: Sequence[ContributionDay],
    today: date,
    months: int = 6,
) -> list[MonthlyCommits]:
    """直近 ``months`` か月分の月別コミット合計を古い順に返す。

    Args:
        days: カレンダー。
        today: 基準日。この月を最後の要素とする。
        months: 返す月数。

    Returns:
        MonthlyCommits のリスト。
    """
    totals: dict[tuple[int, int], int] = {}
    for day in days:
        key = (day.date.year, day.date.month)
        totals[key] = totals.get(key, 0) + day.count

    result: list[MonthlyCommits] = []
    for offset in range(months - 1, -1, -1):
        index = today.year * 12 + (today.month - 1) - offset
        year, month = divmod(index, 12)
        result.append(
            MonthlyCommits(
                month=MONTH_NAMES[month],
                year=year,
                commits=totals.get((year, month + 1), 0),
            )
        )
    return result


def activity_levels(days: Sequence[ContributionDay]) -> list[int]:
    """日別の強度（0〜4）を古い日付が先頭の順で返す。

    最大件数の日を4とした相対スケールで、1件以上の日は最低でも1になる。
    """
    chronological = sorted(days, key=lambda day: day.date)
    peak = max((day.count for day in chronological), default=0)
    if peak == 0:
        return [0] * len(chronological)
    return [
        min(MAX_INTENSITY, math.ceil(day.count * MAX_INTENSITY / peak))
        for day in chronological
    ]


def goal_progress(title: str, current: int, target: int) -> GoalProgress:
    """目標に対する達成率（最大100%）を算出する。"""
    percentage = 100.0 if target <= 0 else min(current / target * 100, 100.0)
    return GoalProgress(
        title=title,
        current=current,
        target=target,
        percentage=round(percentage, 1),
    )


def build_analytics(user: User, today: date) -> AnalyticsResponse:
    """ユーザーの同期済みデータからアナリティクスを組み立てる。

    合計・当日件数・現在のストリークは同期時に保存された値を使い、
    それ以外は保存済みカレンダーから計算する。

    Args:
        user: 対象ユーザー。
        today: 基準日。

    Returns:
        AnalyticsResponse。
    """
    days = parse_stored_days(user.github_contribution_data)

    return AnalyticsResponse(
        total_commits=user.github_total_commits or 0,
        today_commits=user.github_today_commits or 0,
        current_streak=user.github_streak or 0,
        longest_streak=calculate_longest_streak(days),
        active_days=sum(1 for day in days if day.count > 0),
        weekly=weekday_totals(days),
        monthly=monthly_totals(days, today),
        activity=activity_levels(days),
        goals=[
            goal_progress(
                "Daily commits",
                user.github_today_commits or 0,
                settings.DAILY_COMMIT_GOAL,
            ),
            goal_progress(
                "Streak",
                user.github_streak or 0,
                settings.STREAK_GOAL_DAYS,
            ),
        ],
    )
