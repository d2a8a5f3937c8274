"""ストリーク計算。

GitHubのコントリビューションカレンダー（新しい日付が先頭）から
合計・当日件数・現在のストリーク・最長ストリークを算出する。
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from evergreeners.schemas.contribution import ContributionDay


@dataclass(frozen=True)
class StreakStats:
    """カレンダーから導出した集計値。"""

    total_contributions: int
    today_count: int
    current_streak: int
    longest_streak: int


def calculate_current_streak(days: Sequence[ContributionDay], today: date) -> int:
    """現在のストリーク日数を計算する。

    最新のコントリビューション日を起点に、連続して件数が1以上の
    エントリを数える。起点が昨日より前（かつ今日でない）なら途切れた
    とみなして0を返す。今日まだコントリビューションが無くても、
    昨日まで続いていればストリークは維持される。

    Args:
        days: 新しい日付が先頭のカレンダー。
        today: 基準日。

    Returns:
        現在のストリーク日数。
    """
    start = next(
        (index for index, day in enumerate(days) if day.count > 0),
        None,
    )
    if start is None:
        return 0

    yesterday = today - timedelta(days=1)
    last_contribution = days[start].date
    if last_contribution < yesterday and last_contribution != today:
        return 0

    streak = 0
    for day in days[start:]:
        if day.count <= 0:
            break
        streak += 1
    return streak


def calculate_longest_streak(days: Sequence[ContributionDay]) -> int:
    """カレンダー内で最長の連続コントリビューション日数を返す。"""
    longest = 0
    run = 0
    for day in days:
        if day.count > 0:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def calculate_streak_stats(
    days: Sequence[ContributionDay],
    today: date,
    total: Optional[int] = None,
) -> StreakStats:
    """カレンダーから集計値をまとめて算出する。

    Args:
        days: 新しい日付が先頭のカレンダー。
        today: 基準日（UTC日付）。
        total: GitHubが返した合計件数。Noneなら各日の合計を使う。

    Returns:
        StreakStats。
    """
    today_count = next((day.count for day in days if day.date == today), 0)
    if total is None:
        total = sum(day.count for day in days)

    return StreakStats(
        total_contributions=total,
        today_count=today_count,
        current_streak=calculate_current_streak(days, today),
        longest_streak=calculate_longest_streak(days),
    )
