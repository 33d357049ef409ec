"""
定期実行タスク（periodic task）ユーティリティ

一定間隔で実行する asyncio タスクを開始/停止する。

目的:
- 標準 asyncio だけで「毎N秒」を実現する
- 例外が起きてもタスクが死なず、ログに残して継続する
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional


def start_periodic_task(
    *,
    name: str,
    interval_seconds: float,
    wait_first: bool,
    func: Callable[[], Awaitable[None]],
    logger: logging.Logger,
) -> asyncio.Task[None]:
    """
    定期実行タスクを開始する（実行中のイベントループ上で呼ぶこと）。

    Args:
        name: asyncio タスク名（デバッグ用）。
        interval_seconds: 実行間隔（秒）。
        wait_first: True の場合、最初の実行前に interval だけ待つ。
        func: 1回分の処理（awaitable）。
        logger: 例外ログ出力に使用するロガー。

    Returns:
        作成した asyncio.Task。
    """

    # --- 定期実行ループ ---
    async def _runner() -> None:
        # --- 初回待機 ---
        if wait_first:
            await asyncio.sleep(float(interval_seconds))

        # --- キャンセルされるまで定期実行 ---
        while True:
            try:
                await func()
            except asyncio.CancelledError:
                # --- stop で cancel されたら素直に終了 ---
                raise
            except Exception as exc:  # noqa: BLE001
                # --- 例外は落とさずに記録して継続 ---
                logger.exception("periodic task failed: name=%s error=%s", name, str(exc))

            await asyncio.sleep(float(interval_seconds))

    return asyncio.create_task(_runner(), name=str(name))


async def stop_periodic_task(task: Optional[asyncio.Task[None]], *, logger: logging.Logger) -> None:
    """
    定期実行タスクを停止する（None なら何もしない）。

    Args:
        task: start_periodic_task で作成したタスク。
        logger: 停止処理のログ出力に使用するロガー。
    """
    if task is None:
        return

    # --- cancel して終了を待つ（CancelledError は想定内） ---
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    logger.info("periodic task stopped: name=%s", task.get_name())
