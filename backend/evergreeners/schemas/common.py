"""共通Pydanticスキーマ。

フロントエンドとの入出力で使うcamelCaseエイリアス付きの基底モデルを定義する。
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCaseでシリアライズ・受理するモデル基底クラス。

    Python側ではsnake_caseのフィールド名をそのまま使える。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
