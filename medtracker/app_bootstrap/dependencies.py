"""
依存オブジェクトの生成。

目的:
    - FastAPI の Depends で使う生成処理を起動配線側に寄せる。
    - シングルトン生成と DI 入口を同じ責務で管理する。
"""

from __future__ import annotations

from medtracker.config import get_config
from medtracker.core.clock import ClockService, get_clock_service
from medtracker.medications.store import MedicationStore
from medtracker.reminders.evaluator import ReminderEvaluator
from medtracker.storage.kv import SqliteKeyValueStorage


_medication_store: MedicationStore | None = None
_reminder_evaluator: ReminderEvaluator | None = None


def get_medication_store() -> MedicationStore:
    """
    MedicationStore のシングルトンを返す。

    初回だけ生成し、保存済みリストを読み込む。
    """

    global _medication_store

    if _medication_store is None:
        cfg = get_config()
        store = MedicationStore(
            SqliteKeyValueStorage(quota_bytes=cfg.storage_quota_bytes),
            storage_key=cfg.storage_key,
        )
        store.load()
        _medication_store = store
    return _medication_store


def get_reminder_evaluator() -> ReminderEvaluator:
    """
    ReminderEvaluator のシングルトンを返す。
    """

    global _reminder_evaluator

    if _reminder_evaluator is None:
        cfg = get_config()
        _reminder_evaluator = ReminderEvaluator(
            get_medication_store(),
            clock=get_clock_service(),
            interval_seconds=cfg.reminder_interval_seconds,
            auto_dismiss_seconds=cfg.notification_auto_dismiss_seconds,
        )
    return _reminder_evaluator


def reset_services() -> None:
    """
    シングルトンを破棄する（設定の再読み込み/テスト向け）。
    """

    global _medication_store, _reminder_evaluator
    _medication_store = None
    _reminder_evaluator = None


def get_medication_store_dep() -> MedicationStore:
    """
    MedicationStore を Depends 用に返す。
    """

    return get_medication_store()


def get_clock_service_dep() -> ClockService:
    """
    ClockService を Depends 用に返す。
    """

    # --- system/domain 時刻は共有サービスを返す ---
    return get_clock_service()
