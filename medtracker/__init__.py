"""
MedTracker パッケージ。

服薬記録の保存（MedicationStore）と、毎分のリマインダー評価（ReminderEvaluator）を提供する。
"""

from __future__ import annotations

__version__ = "0.1.0"
