"""
服薬記録のデータモデル

MedicationRecord は不変（frozen）とし、更新は dataclasses.replace で新しい値を作る。
保存形式（JSON）のキーは camelCase（id/name/dosage/time/frequency/takenAt/createdAt）。
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from medtracker.core import time_utils


# ユーザーが入力する必須項目（add/update の対象）
REQUIRED_FIELDS = ("name", "dosage", "time", "frequency")


@dataclass(frozen=True)
class MedicationRecord:
    """
    1件の服薬記録。

    - id / created_at は作成時に決まり、以後変わらない
    - taken_at は「最後に服用済みにした時刻」。None は未服用
    """

    id: str
    name: str
    dosage: str
    time: str  # HH:MM（24h, ローカル壁時計）
    frequency: str  # 自由記述のカテゴリ（daily など）
    created_at: datetime
    taken_at: Optional[datetime] = None

    def with_fields(self, fields: "MedicationFields") -> "MedicationRecord":
        """入力項目だけを差し替えた記録を返す（id/created_at/taken_at は保持）。"""
        return dataclasses.replace(
            self,
            name=fields.name,
            dosage=fields.dosage,
            time=fields.time,
            frequency=fields.frequency,
        )

    def with_taken_at(self, taken_at: Optional[datetime]) -> "MedicationRecord":
        return dataclasses.replace(self, taken_at=taken_at)

    def to_dict(self) -> dict[str, Any]:
        """保存用の dict を返す。"""
        return {
            "id": self.id,
            "name": self.name,
            "dosage": self.dosage,
            "time": self.time,
            "frequency": self.frequency,
            "takenAt": time_utils.format_iso8601(self.taken_at),
            "createdAt": time_utils.format_iso8601(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MedicationRecord":
        """
        保存用の dict から記録を復元する。

        旧データ互換:
        - 数値 id は文字列として読む
        - takenAt が無ければ lastTaken を読む
        - taken（bool）は読み捨てる
        """
        taken_raw = data.get("takenAt", data.get("lastTaken"))
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            dosage=str(data["dosage"]),
            time=str(data["time"]),
            frequency=str(data["frequency"]),
            created_at=time_utils.parse_iso8601(str(data["createdAt"])),
            taken_at=(time_utils.parse_iso8601(str(taken_raw)) if taken_raw else None),
        )


@dataclass(frozen=True)
class MedicationFields:
    """ユーザー入力項目（正規化済み）。"""

    name: str
    dosage: str
    time: str
    frequency: str


@dataclass(frozen=True)
class ProgressSummary:
    """今日の服用進捗。"""

    taken: int
    total: int
    ratio: float
    percentage: int  # 0..100（四捨五入）
    streak: int  # 全件服用済みなら 1、それ以外は 0
