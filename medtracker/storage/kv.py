"""
キー/値ストレージ

服薬リストは「1キー = JSON テキスト全体」で保存する。
読み込みは起動時に1回、書き込みは変更のたびに全体を上書きする。

実装:
- SqliteKeyValueStorage: medtracker.db（SQLAlchemy）に保存する。
- InMemoryKeyValueStorage: プロセス内の dict に保存する（テスト/一時利用）。

どちらも容量上限（quota）を超える書き込みは PersistenceError で拒否する。
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from medtracker.errors import PersistenceError
from medtracker.storage.db import storage_session_scope
from medtracker.storage.models import KeyValueEntry


logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """永続化キー/値インタフェース。"""

    def get_item(self, key: str) -> Optional[str]:
        """キーの値を返す。無ければ None。"""
        ...

    def set_item(self, key: str, value: str) -> None:
        """キーの値を丸ごと上書きする。"""
        ...


def _check_quota(key: str, value: str, quota_bytes: Optional[int]) -> None:
    """quota を超える書き込みなら PersistenceError を投げる。"""

    if quota_bytes is None or int(quota_bytes) <= 0:
        return
    size = len(key.encode("utf-8")) + len(value.encode("utf-8"))
    if size > int(quota_bytes):
        raise PersistenceError(f"storage quota exceeded: key={key} size={size} quota={int(quota_bytes)}")


class InMemoryKeyValueStorage:
    """dict に保存するキー/値ストレージ。"""

    def __init__(self, *, quota_bytes: Optional[int] = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(str(key))

    def set_item(self, key: str, value: str) -> None:
        _check_quota(str(key), str(value), self._quota_bytes)
        self._items[str(key)] = str(value)


class SqliteKeyValueStorage:
    """
    medtracker.db の kv_entries テーブルに保存するキー/値ストレージ。

    init_storage_db() 済みであること。
    """

    def __init__(self, *, quota_bytes: Optional[int] = None) -> None:
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        try:
            with storage_session_scope() as db:
                row = db.get(KeyValueEntry, str(key))
                return None if row is None else str(row.value)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to read key={key}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        _check_quota(str(key), str(value), self._quota_bytes)

        # --- upsert（1キー1行） ---
        try:
            with storage_session_scope() as db:
                row = db.get(KeyValueEntry, str(key))
                now_ts = int(time.time())
                if row is None:
                    db.add(KeyValueEntry(key=str(key), value=str(value), updated_at=now_ts))
                else:
                    row.value = str(value)
                    row.updated_at = now_ts
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to write key={key}: {exc}") from exc
        logger.debug("storage item written key=%s bytes=%s", key, len(str(value).encode("utf-8")))
