from __future__ import annotations

from datetime import datetime
from itertools import count

import pytest

from medtracker.medications.store import MedicationStore
from medtracker.reminders.notifier import NotificationPermission
from medtracker.storage.kv import InMemoryKeyValueStorage


ASPIRIN = {"name": "Aspirin", "dosage": "100mg", "time": "08:00", "frequency": "daily"}

# ローカル壁時計（naive）で固定する
MORNING = datetime(2026, 10, 19, 8, 5)


class RecordingNotifier:
    """notify 呼び出しを記録するだけの Notifier。"""

    def __init__(self, permission: NotificationPermission = NotificationPermission.GRANTED) -> None:
        self.permission = permission
        self.permission_requests = 0
        self.calls: list[tuple[str, str, float]] = []

    async def request_permission(self) -> NotificationPermission:
        self.permission_requests += 1
        return self.permission

    def notify(self, title: str, body: str, *, auto_dismiss_seconds: float) -> None:
        self.calls.append((title, body, auto_dismiss_seconds))


class FixedClock:
    """now_local が常に同じ時刻を返す時計。"""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_local(self) -> datetime:
        return self.now


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(storage: InMemoryKeyValueStorage) -> MedicationStore:
    ids = count(1)
    return MedicationStore(storage, id_factory=lambda: f"med-{next(ids)}")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
