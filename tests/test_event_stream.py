from __future__ import annotations

import asyncio
import json
import logging

from medtracker.reminders.notifier import (
    REMINDER_EVENT_TYPE,
    REMINDER_TITLE,
    EventStreamNotifier,
    NotificationPermission,
)
from medtracker.runtime import event_stream


def test_notify_before_install_is_dropped_with_warning(caplog):
    assert not event_stream.is_installed()

    with caplog.at_level(logging.WARNING, logger="medtracker.reminders.notifier"):
        EventStreamNotifier().notify(REMINDER_TITLE, "Time to take Aspirin (100mg)", auto_dismiss_seconds=10)

    assert "reminder dropped" in caplog.text
    assert event_stream._event_queue is None


def test_notifier_publishes_reminder_event():
    notifier = EventStreamNotifier()

    async def _run():
        event_stream.install(asyncio.get_running_loop())
        try:
            notifier.notify(REMINDER_TITLE, "Time to take Aspirin (100mg)", auto_dismiss_seconds=10)
            # call_soon_threadsafe の投入を1周待つ
            await asyncio.sleep(0)
            return event_stream._event_queue.get_nowait()
        finally:
            event_stream.uninstall()

    event = asyncio.run(_run())

    assert event.type == REMINDER_EVENT_TYPE
    assert event.data == {
        "title": REMINDER_TITLE,
        "body": "Time to take Aspirin (100mg)",
        "auto_dismiss_seconds": 10.0,
    }
    assert json.loads(event_stream._serialize_event(event))["type"] == "medication.reminder"


def test_notifier_permission_follows_enabled_flag():
    assert asyncio.run(EventStreamNotifier().request_permission()) is NotificationPermission.GRANTED
    assert asyncio.run(EventStreamNotifier(enabled=False).request_permission()) is NotificationPermission.DENIED
