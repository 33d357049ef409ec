"""
ログ設定

起動時に一度だけ呼び出して、ルートロガーにコンソール/ファイル出力を設定する。
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Iterable


_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_MANAGED_HANDLER_ATTR = "_medtracker_managed"


def setup_logging(
    level: str,
    *,
    log_file_enabled: bool = False,
    log_file_path: str | None = None,
    log_file_max_bytes: int = 200_000,
) -> None:
    """
    ルートロガーを設定する。

    多重呼び出し時は、前回この関数が付けたハンドラだけを付け替える。
    """
    root = logging.getLogger()
    root.setLevel(str(level or "INFO").upper())

    # --- 前回設定したハンドラを外す（他ライブラリのハンドラは触らない） ---
    for h in list(root.handlers):
        if getattr(h, _MANAGED_HANDLER_ATTR, False):
            root.removeHandler(h)
            h.close()

    formatter = logging.Formatter(_LOG_FORMAT)

    # --- コンソール ---
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    setattr(console, _MANAGED_HANDLER_ATTR, True)
    root.addHandler(console)

    # --- ファイル（ローテーション） ---
    if log_file_enabled and log_file_path:
        path = Path(log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=int(log_file_max_bytes),
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        setattr(file_handler, _MANAGED_HANDLER_ATTR, True)
        root.addHandler(file_handler)


class _AccessPathFilter(logging.Filter):
    """uvicorn.access のうち、指定パスへのリクエスト行を落とす。"""

    def __init__(self, paths: Iterable[str]) -> None:
        super().__init__()
        self._paths = tuple(str(p) for p in paths)

    def filter(self, record: logging.LogRecord) -> bool:
        # uvicorn.access の args は (client_addr, method, path, http_version, status_code)
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            path = str(args[2]).split("?", 1)[0]
            return path not in self._paths
        return True


def suppress_uvicorn_access_log_paths(*paths: str) -> None:
    """指定パスへのアクセスログを uvicorn.access から除外する。"""

    logging.getLogger("uvicorn.access").addFilter(_AccessPathFilter(paths))
