"""
WebSocketによるアプリイベントストリーミングAPI

服薬リマインダー（medication.reminder）とリスト変更（medications.changed）を
リアルタイムで配信する。表示側はこのストリームを購読して通知/再描画を行う。
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from medtracker.runtime import event_stream


router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


@router.websocket("/stream")
async def stream_events(websocket: WebSocket) -> None:
    """
    アプリイベントをWebSocketでストリーミング配信する。

    切断時は自動でクライアント登録解除。クライアントからのメッセージは読み捨てる。
    """
    await websocket.accept()

    client_added = False
    try:
        # --- 購読クライアントとして登録する ---
        await event_stream.add_client(websocket)
        client_added = True
        logger.info("events websocket connected")

        # --- 受信ループ（切断検知のため読み続ける） ---
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("events websocket disconnected by client")
    except Exception as exc:  # noqa: BLE001
        logger.warning("events websocket terminated by error: %s", str(exc))
    finally:
        if client_added:
            await event_stream.remove_client(websocket)
        logger.info("events websocket disconnected")
