"""
MedTracker の例外

呼び出し側へ同期的に伝える（リトライ/ロールバックはしない）。
"""

from __future__ import annotations

from typing import Iterable


class MedTrackerError(Exception):
    """MedTracker の例外の基底クラス。"""


class ValidationError(MedTrackerError):
    """必須項目の欠落/形式不正。"""

    def __init__(self, message: str, *, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


class NotFoundError(MedTrackerError):
    """存在しない id を指定した。"""

    def __init__(self, medication_id: str) -> None:
        super().__init__(f"medication not found: {medication_id}")
        self.medication_id = str(medication_id)


class PersistenceError(MedTrackerError):
    """
    永続化（読み書き）の失敗。

    書き込み失敗時はメモリ上の状態が永続化側より先行している。
    """
