"""
通知の受け口（Notifier）

ReminderEvaluator は通知手段を知らない。起動時に Notifier を渡し、
許可の確認（request_permission）と通知（notify）だけを呼ぶ。
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from medtracker.medications.models import MedicationRecord
from medtracker.runtime import event_stream


logger = logging.getLogger(__name__)

REMINDER_TITLE = "💊 Medication Reminder"
REMINDER_EVENT_TYPE = "medication.reminder"


class NotificationPermission(str, enum.Enum):
    """通知許可の状態。"""

    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class ReminderEvent:
    """1件のリマインダー（1記録につき1件）。"""

    medication_id: str
    name: str
    dosage: str
    scheduled_time: str  # HH:MM
    fired_at: datetime
    title: str
    body: str


def build_reminder_message(record: MedicationRecord) -> tuple[str, str]:
    """リマインダーの (title, body) を返す。"""
    return (REMINDER_TITLE, f"Time to take {record.name} ({record.dosage})")


class Notifier(Protocol):
    """通知手段のインタフェース。"""

    async def request_permission(self) -> NotificationPermission:
        """通知の許可を求める（起動時に1回）。"""
        ...

    def notify(self, title: str, body: str, *, auto_dismiss_seconds: float) -> None:
        """通知を1件出す。"""
        ...


class EventStreamNotifier:
    """
    WebSocket のイベントストリームへ通知を流す Notifier。

    クライアント側が medication.reminder を受けて表示/自動クローズする。
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = bool(enabled)

    async def request_permission(self) -> NotificationPermission:
        # --- 設定で無効化されていれば拒否扱い ---
        permission = NotificationPermission.GRANTED if self._enabled else NotificationPermission.DENIED
        logger.info("notification permission: %s", permission.value)
        return permission

    def notify(self, title: str, body: str, *, auto_dismiss_seconds: float) -> None:
        # --- 配信が起動していなければ届け先が無い ---
        if not event_stream.is_installed():
            logger.warning("event stream is not installed; reminder dropped: %s", body)
            return
        event_stream.publish(
            type=REMINDER_EVENT_TYPE,
            data={
                "title": str(title),
                "body": str(body),
                "auto_dismiss_seconds": float(auto_dismiss_seconds),
            },
        )
