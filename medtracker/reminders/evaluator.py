"""
リマインダー評価（ReminderEvaluator）

一定間隔（既定60秒）で全記録を見て、予定時刻（HH:MM）が現在の分と一致し、
かつ今日まだ服用していない記録について通知を1件ずつ出す。

方針:
- 1分解像度の予定に60秒周期の tick を当てるので、同じ分に1回だけ発火する。
- tick が遅れて該当の分を飛ばした場合は取りこぼす（追いかけ発火はしない）。
- 通知の許可が無ければ tick は何もしない（エラーにもしない）。
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from medtracker.config import DEFAULT_NOTIFICATION_AUTO_DISMISS_SECONDS, DEFAULT_REMINDER_INTERVAL_SECONDS
from medtracker.core import time_utils
from medtracker.core.clock import ClockService, get_clock_service
from medtracker.medications.store import MedicationStore
from medtracker.reminders.notifier import (
    NotificationPermission,
    Notifier,
    ReminderEvent,
    build_reminder_message,
)
from medtracker.runtime.periodic import start_periodic_task, stop_periodic_task


logger = logging.getLogger(__name__)


class ReminderEvaluator:
    """毎分のリマインダー評価。Store は注入され、読み取りだけを行う。"""

    def __init__(
        self,
        store: MedicationStore,
        *,
        clock: Optional[ClockService] = None,
        interval_seconds: float = DEFAULT_REMINDER_INTERVAL_SECONDS,
        auto_dismiss_seconds: float = DEFAULT_NOTIFICATION_AUTO_DISMISS_SECONDS,
    ) -> None:
        self._store = store
        self._clock = clock or get_clock_service()
        self._interval_seconds = float(interval_seconds)
        self._auto_dismiss_seconds = float(auto_dismiss_seconds)

        # --- start/stop で変わる状態 ---
        self._notifier: Optional[Notifier] = None
        self._permission = NotificationPermission.DENIED
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def due_reminders(self, now: datetime) -> list[ReminderEvent]:
        """now の分に発火すべきリマインダーを返す（通知はしない）。"""

        current_minute = time_utils.minute_of_day(now)
        events: list[ReminderEvent] = []
        for record in self._store.list():
            if record.time != current_minute:
                continue
            if self._store.is_taken_today(record, now):
                continue
            title, body = build_reminder_message(record)
            events.append(
                ReminderEvent(
                    medication_id=record.id,
                    name=record.name,
                    dosage=record.dosage,
                    scheduled_time=record.time,
                    fired_at=now,
                    title=title,
                    body=body,
                )
            )
        return events

    def tick(self, now: Optional[datetime] = None) -> list[ReminderEvent]:
        """
        1回分の評価を行い、通知したリマインダーを返す。

        許可が無い（start 前を含む）場合は何もせず空リストを返す。
        """

        # --- 許可が無ければ no-op ---
        notifier = self._notifier
        if notifier is None or self._permission is not NotificationPermission.GRANTED:
            logger.debug("reminder tick skipped (notification permission not granted)")
            return []

        when = now if now is not None else self._clock.now_local()
        emitted: list[ReminderEvent] = []
        for event in self.due_reminders(when):
            # --- 1件の失敗で他のリマインダーを止めない ---
            try:
                notifier.notify(event.title, event.body, auto_dismiss_seconds=self._auto_dismiss_seconds)
            except Exception:  # noqa: BLE001
                logger.exception("reminder notify failed medication_id=%s", event.medication_id)
                continue
            emitted.append(event)
            logger.info(
                "reminder fired medication_id=%s name=%s time=%s",
                event.medication_id,
                event.name,
                event.scheduled_time,
            )
        return emitted

    async def start(self, notifier: Notifier) -> NotificationPermission:
        """
        通知手段を受け取り、許可を確認してから定期評価を開始する。

        許可が得られなくてもループは動かす（tick は no-op になる）。
        """

        if self.running:
            raise RuntimeError("reminder evaluator is already running")

        # --- 許可の確認は起動時の1回だけ ---
        self._notifier = notifier
        self._permission = await notifier.request_permission()

        async def _tick_once() -> None:
            self.tick()

        self._task = start_periodic_task(
            name="periodic_reminders",
            interval_seconds=self._interval_seconds,
            wait_first=True,
            func=_tick_once,
            logger=logger,
        )
        logger.info(
            "reminder evaluator started interval=%ss permission=%s",
            self._interval_seconds,
            self._permission.value,
        )
        return self._permission

    async def stop(self) -> None:
        """定期評価を止める（動いていなければ何もしない）。"""

        task = self._task
        self._task = None
        await stop_periodic_task(task, logger=logger)
        self._notifier = None
        self._permission = NotificationPermission.DENIED
