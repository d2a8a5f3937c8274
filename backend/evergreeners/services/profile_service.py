"""プロフィール更新サービス。

編集可能フィールドの部分更新と、非公開化時の匿名名生成を提供する。
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Optional

from evergreeners.models import User
from evergreeners.schemas.user import ProfileUpdateRequest

logger = logging.getLogger(__name__)

ANONYMOUS_ADJECTIVES = ("Hidden", "Secret", "Silent", "Quiet", "Mysterious")
ANONYMOUS_NOUNS = ("Tree", "Leaf", "Sprout", "Root", "Seed")

EDITABLE_FIELDS = frozenset(
    {
        "name",
        "username",
        "bio",
        "location",
        "website",
        "image",
        "is_public",
        "anonymous_name",
    }
)


def generate_anonymous_name(rng: Optional[random.Random] = None) -> str:
    """``<Adjective><Noun><0-999>`` 形式の匿名名を生成する。

    Args:
        rng: 乱数生成器。省略時は random モジュールを使う。

    Returns:
        生成した匿名名（例: ``QuietSprout417``）。
    """
    source = rng or random
    adjective = source.choice(ANONYMOUS_ADJECTIVES)
    noun = source.choice(ANONYMOUS_NOUNS)
    return f"{adjective}{noun}{source.randrange(1000)}"


def apply_profile_update(
    user: User,
    request: ProfileUpdateRequest,
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """リクエストで送信されたフィールドのみをユーザーに反映する。

    ``is_public`` がFalseで、既存の匿名名も送信された匿名名も無い場合は
    匿名名を自動生成する。

    Args:
        user: 更新対象のユーザー。
        request: 部分更新リクエスト。
        rng: 匿名名生成に使う乱数生成器。

    Returns:
        今回設定された匿名名（送信または生成）。設定されなければNone。
    """
    updates = request.model_dump(exclude_unset=True)

    if request.is_public is False and not user.anonymous_name and not updates.get(
        "anonymous_name"
    ):
        updates["anonymous_name"] = generate_anonymous_name(rng)
        logger.info(
            "Generated anonymous name for user %s: %s",
            user.id,
            updates["anonymous_name"],
        )

    for name, value in updates.items():
        if name in EDITABLE_FIELDS:
            setattr(user, name, value)
    user.updated_at = datetime.now(timezone.utc)

    return updates.get("anonymous_name")
