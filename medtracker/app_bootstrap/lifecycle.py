"""
アプリライフサイクル登録。

目的:
    - startup / shutdown の副作用を 1 箇所へ集約する。
    - `main.py` は登録呼び出しだけにする。
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI

from medtracker.app_bootstrap.dependencies import get_medication_store, get_reminder_evaluator
from medtracker.config import Config
from medtracker.reminders.notifier import EventStreamNotifier
from medtracker.runtime import event_stream
from medtracker.runtime.logging import suppress_uvicorn_access_log_paths


logger = logging.getLogger(__name__)


def register_lifecycle_hooks(app: FastAPI, *, config: Config) -> None:
    """
    FastAPI の startup / shutdown フックを登録する。
    """

    # --- access log のノイズ抑制は startup 時に確実に付与する ---
    @app.on_event("startup")
    async def suppress_noisy_uvicorn_access_logs() -> None:
        """頻繁なアクセスログを uvicorn.access から除外する。"""

        suppress_uvicorn_access_log_paths(
            "/api/health",
            "/favicon.ico",
        )

    # --- 保存済みリストを起動時に読み込む ---
    @app.on_event("startup")
    async def load_medications() -> None:
        """MedicationStore を生成し、保存済みリストを読み込む。"""

        store = get_medication_store()
        logger.info("medication store ready count=%s", len(store))

    # --- イベント配信を起動する ---
    @app.on_event("startup")
    async def start_event_stream_dispatcher() -> None:
        """イベント WebSocket 配信を起動する。"""

        loop = asyncio.get_running_loop()
        event_stream.install(loop)
        await event_stream.start_dispatcher()

    # --- リマインダー評価を起動する ---
    @app.on_event("startup")
    async def start_reminder_evaluator() -> None:
        """通知許可を確認し、毎分のリマインダー評価を開始する。"""

        # --- event_stream 起動後に開始し、 publish レースを避ける ---
        evaluator = get_reminder_evaluator()
        await evaluator.start(EventStreamNotifier(enabled=config.notifications_enabled))

    # --- リマインダーを先に止めて publish レースを避ける ---
    @app.on_event("shutdown")
    async def stop_reminder_evaluator() -> None:
        """リマインダー評価を停止する。"""

        await get_reminder_evaluator().stop()

    # --- イベント配信を停止する ---
    @app.on_event("shutdown")
    async def stop_event_stream_dispatcher() -> None:
        """イベント WebSocket 配信を停止する。"""

        await event_stream.stop_dispatcher()
        event_stream.uninstall()
