"""GitHubコントリビューションカレンダーのスキーマ。

GraphQL APIの ``contributionDays`` 要素をそのまま検証できるよう、
``contributionCount`` をエイリアスとして持つ。
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContributionDay(BaseModel):
    """1日分のコントリビューション数。"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date: date
    count: int = Field(..., ge=0, alias="contributionCount")

    def to_json(self) -> dict[str, Any]:
        """users.github_contribution_data に保存する形式へ変換する。"""
        return self.model_dump(mode="json", by_alias=True)


class ContributionCalendar(BaseModel):
    """コントリビューションカレンダー（新しい日付が先頭）。"""

    total: int = Field(..., ge=0)
    days: list[ContributionDay] = Field(default_factory=list)


def parse_stored_days(raw: list[dict[str, Any]] | None) -> list[ContributionDay]:
    """保存済みのカレンダーJSONを ContributionDay のリストへ戻す。

    Args:
        raw: users.github_contribution_data の値。

    Returns:
        ContributionDay のリスト。未同期なら空リスト。
    """
    if not raw:
        return []
    return [ContributionDay.model_validate(item) for item in raw]
