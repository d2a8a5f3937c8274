"""Tests for ``evergreeners.services.streak``."""

from __future__ import annotations

from datetime import date, timedelta

from evergreeners.schemas.contribution import ContributionDay
from evergreeners.services.streak import (
    calculate_current_streak,
    calculate_longest_streak,
    calculate_streak_stats,
)

TODAY = date(2026, 10, 18)


def _days(*counts: int, start: date = TODAY) -> list[ContributionDay]:
    """Build a newest-first calendar: ``counts[0]`` is *start*, then one
    day earlier for each following count."""
    return [
        ContributionDay(date=start - timedelta(days=offset), count=count)
        for offset, count in enumerate(counts)
    ]


class TestCurrentStreak:
    """Current streak from a newest-first calendar."""

    def test_contributed_today(self) -> None:
        days = _days(2, 1, 4, 0, 7)
        assert calculate_current_streak(days, TODAY) == 3

    def test_last_contribution_yesterday_keeps_streak(self) -> None:
        days = _days(0, 3, 2, 0, 5)
        assert calculate_current_streak(days, TODAY) == 2

    def test_gap_of_two_days_resets(self) -> None:
        days = _days(0, 0, 3, 5, 1, 1, 1, 1)
        assert calculate_current_streak(days, TODAY) == 0

    def test_missing_yesterday_entry_resets(self) -> None:
        days = [
            ContributionDay(date=TODAY, count=0),
            ContributionDay(date=TODAY - timedelta(days=2), count=3),
            ContributionDay(date=TODAY - timedelta(days=3), count=5),
        ]
        assert calculate_current_streak(days, TODAY) == 0

    def test_all_zero(self) -> None:
        assert calculate_current_streak(_days(0, 0, 0), TODAY) == 0

    def test_empty_calendar(self) -> None:
        assert calculate_current_streak([], TODAY) == 0

    def test_run_reaching_end_of_calendar(self) -> None:
        assert calculate_current_streak(_days(1, 1, 1), TODAY) == 3


class TestLongestStreak:
    def test_longest_run_anywhere(self) -> None:
        assert calculate_longest_streak(_days(3, 0, 1, 1, 1, 0, 2)) == 3

    def test_all_zero(self) -> None:
        assert calculate_longest_streak(_days(0, 0)) == 0


class TestStreakStats:
    def test_example_yesterday_run(self) -> None:
        days = _days(0, 3, 2, 0, 5)
        stats = calculate_streak_stats(days, TODAY, total=10)
        assert stats.current_streak == 2
        assert stats.today_count == 0
        assert stats.total_contributions == 10
        assert stats.longest_streak == 2

    def test_today_count_comes_from_matching_date(self) -> None:
        stats = calculate_streak_stats(_days(4, 1), TODAY, total=5)
        assert stats.today_count == 4

    def test_today_absent_from_calendar(self) -> None:
        days = _days(2, 2, start=TODAY - timedelta(days=1))
        stats = calculate_streak_stats(days, TODAY, total=4)
        assert stats.today_count == 0
        assert stats.current_streak == 2

    def test_all_zero_totals(self) -> None:
        stats = calculate_streak_stats(_days(0, 0, 0), TODAY)
        assert stats.total_contributions == 0
        assert stats.current_streak == 0

    def test_total_defaults_to_sum(self) -> None:
        stats = calculate_streak_stats(_days(1, 2, 3), TODAY)
        assert stats.total_contributions == 6
