"""
WebSocket向けアプリイベント配信

服薬リマインダー（medication.reminder）やリスト変更（medications.changed）などの
アプリケーションイベントを、接続中の WebSocket クライアントへブロードキャストする。
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from fastapi import WebSocket


@dataclass
class AppEvent:
    """WebSocket配信用のイベント。"""

    type: str  # イベント種別（medication.reminder, medications.changed 等）
    data: Dict[str, Any]  # 追加データ


_event_queue: Optional[asyncio.Queue[AppEvent]] = None
_clients: Set["WebSocket"] = set()
_dispatch_task: Optional[asyncio.Task[None]] = None
_handler_installed = False
_loop: Optional[asyncio.AbstractEventLoop] = None
logger = logging.getLogger(__name__)

# --- 配信バックプレッシャー設定 ---
# NOTE:
# - キューは有界にして、遅延時のメモリ膨張を防ぐ。
# - 送信はタイムアウトを設け、遅いクライアントを切り離す。
_EVENT_QUEUE_MAXSIZE = 1000
_SEND_TIMEOUT_SECONDS = 2.0


def _serialize_event(event: AppEvent) -> str:
    """イベントをJSON文字列にシリアライズする。"""
    return json.dumps(
        {
            "type": event.type,
            "data": event.data,
        },
        ensure_ascii=False,
        separators=(",", ":"),
        default=str,
    )


def install(loop: asyncio.AbstractEventLoop) -> None:
    """
    イベントストリームを初期化する。

    publish()で使用するイベントループとキューをセットアップする。
    多重呼び出しは無視される。
    """
    global _event_queue, _handler_installed, _loop
    if _handler_installed:
        return
    _loop = loop
    _event_queue = asyncio.Queue(maxsize=int(_EVENT_QUEUE_MAXSIZE))
    _handler_installed = True
    logger.info("event stream installed")


def uninstall() -> None:
    """
    イベントストリームの状態を初期化する。

    停止後の再起動（テストでのアプリ再生成など）に備える。
    """
    global _event_queue, _handler_installed, _loop
    _event_queue = None
    _handler_installed = False
    _loop = None
    _clients.clear()


async def start_dispatcher() -> None:
    """
    イベント配信タスクを起動する。

    キューからイベントを取り出し、接続中の全クライアントへ配信する。
    """
    global _dispatch_task
    if _dispatch_task is not None:
        return
    if _event_queue is None:
        raise RuntimeError("event queue is not initialized. call install() first.")
    loop = asyncio.get_running_loop()
    _dispatch_task = loop.create_task(_dispatch_loop())
    logger.info("event stream dispatcher started")


async def stop_dispatcher() -> None:
    """
    イベント配信タスクを停止する。

    アプリケーション終了時に呼び出してタスクをキャンセルする。
    """
    global _dispatch_task
    if _dispatch_task is None:
        return
    _dispatch_task.cancel()
    try:
        await _dispatch_task
    except asyncio.CancelledError:  # pragma: no cover
        pass
    _dispatch_task = None


def _enqueue_event_nonblocking(event: AppEvent) -> None:
    """イベントを non-blocking でキュー投入する（満杯時はドロップ）。"""

    if _event_queue is None:
        return
    try:
        _event_queue.put_nowait(event)
    except asyncio.QueueFull:
        logger.warning("event stream queue full; dropped type=%s", str(event.type or ""))


def is_installed() -> bool:
    """install 済み（publish が配信される状態）かを返す。"""
    return bool(_handler_installed and _event_queue is not None and _loop is not None)


def publish(*, type: str, data: Optional[Dict[str, Any]] = None) -> None:
    """
    イベントをキューに投入する。

    スレッドセーフにイベントを追加し、dispatcherが配信を行う。
    install 前は何もしない。
    """
    if _event_queue is None or _loop is None:
        return
    event = AppEvent(type=type, data=data or {})
    try:
        _loop.call_soon_threadsafe(_enqueue_event_nonblocking, event)
    except RuntimeError:
        # --- shutdown レース（loop close 後）は捨てる ---
        return


async def add_client(ws: "WebSocket") -> None:
    """WebSocketクライアントを購読リストに登録する。"""
    _clients.add(ws)


async def remove_client(ws: "WebSocket") -> None:
    """WebSocketクライアントを購読リストから解除する。"""
    _clients.discard(ws)


async def _dispatch_loop() -> None:
    while True:
        if _event_queue is None:  # pragma: no cover
            await asyncio.sleep(0.1)
            continue
        event = await _event_queue.get()
        payload = _serialize_event(event)

        dead_clients: List["WebSocket"] = []

        # --- 送信ログ（ブロードキャスト） ---
        # NOTE: 送信ペイロード（dataの中身）はログに出さず、type と接続数だけを記録する。
        logger.info("event stream broadcast type=%s clients=%s", event.type, len(_clients))
        for ws in list(_clients):
            try:
                await asyncio.wait_for(ws.send_text(payload), timeout=float(_SEND_TIMEOUT_SECONDS))
            except Exception:  # noqa: BLE001
                dead_clients.append(ws)

        for ws in dead_clients:
            await remove_client(ws)
