"""
服薬記録パッケージ。

目的:
    - 服薬記録のモデル / ストア / 表示用整形を1箇所へ集約する。
"""

from __future__ import annotations

from medtracker.medications.models import MedicationFields, MedicationRecord, ProgressSummary
from medtracker.medications.store import MedicationStore, dump_records, parse_records

__all__ = [
    "MedicationFields",
    "MedicationRecord",
    "MedicationStore",
    "ProgressSummary",
    "dump_records",
    "parse_records",
]
