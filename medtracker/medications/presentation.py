"""
服薬記録の表示用整形

カード表示に使う文言（状態/時刻表記）を記録から組み立てる。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from medtracker.core import time_utils
from medtracker.medications.models import MedicationRecord
from medtracker.medications.store import MedicationStore


def describe_record(record: MedicationRecord, now: datetime) -> dict[str, Any]:
    """記録に表示用の項目を足した dict を返す。"""

    taken_today = MedicationStore.is_taken_today(record, now)
    # now より未来の taken_at（domain 時刻を戻した後）は表示しない
    taken_at = record.taken_at
    if taken_at is not None and time_utils.is_after(taken_at, now):
        taken_at = None
    return {
        "id": record.id,
        "name": record.name,
        "dosage": record.dosage,
        "time": record.time,
        "frequency": record.frequency,
        "taken_at": record.taken_at,
        "created_at": record.created_at,
        "taken_today": taken_today,
        "status": "taken" if taken_today else "pending",
        "time_display": time_utils.format_time_12h(record.time),
        "last_taken_display": (
            time_utils.format_datetime_display(taken_at, now) if taken_at is not None else None
        ),
    }
