"""
リマインダー機能パッケージ。

目的:
    - 通知手段（Notifier）と毎分の評価（ReminderEvaluator）を1箇所に集約する。
"""

from __future__ import annotations
