"""
アプリ内時計サービス。

服薬の「今日」判定とリマインダーの「今の分」は、実時間ではなく domain 時刻で決める。
domain 時刻は実時間 + オフセット秒で、/api/control/clock から進めたり戻したりできる。
08:00 のリマインダーや日付の切り替わりを、実時間待ちなしで確認するためのもの。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import threading
import time


@dataclass(frozen=True)
class ClockSnapshot:
    """時計状態の読み取り専用スナップショット。"""

    system_now_utc_ts: int
    domain_now_utc_ts: int
    domain_offset_seconds: int


class ClockService:
    """
    domain 時刻を配る時計。

    服薬記録の taken_at / created_at とリマインダー評価はすべて now_local() を使う。
    """

    def __init__(self) -> None:
        # NOTE: 同期エンドポイント（スレッドプール）とイベントループの両方から触るため lock で守る。
        self._lock = threading.Lock()
        self._domain_offset_seconds = 0

    def _read(self) -> tuple[float, int]:
        """(実時間の epoch 秒, オフセット秒) を同一時点で読む。"""

        with self._lock:
            return time.time(), int(self._domain_offset_seconds)

    def now_local(self) -> datetime:
        """domain 時刻をローカルタイムゾーンの aware datetime で返す。"""

        system_now, offset = self._read()
        return datetime.fromtimestamp(system_now + offset, tz=timezone.utc).astimezone()

    def get_domain_offset_seconds(self) -> int:
        return self._read()[1]

    def advance_domain_seconds(self, *, seconds: int) -> int:
        """
        domain 時刻を前進させ、変更後のオフセット秒を返す。

        後退はできない（戻すときは reset_domain_offset）。
        """

        delta = int(seconds)
        if delta <= 0:
            raise ValueError("seconds must be >= 1")

        with self._lock:
            self._domain_offset_seconds += delta
            return int(self._domain_offset_seconds)

    def reset_domain_offset(self) -> None:
        """オフセットを0へ戻し、domain 時刻を実時間にそろえる。"""

        with self._lock:
            self._domain_offset_seconds = 0

    def snapshot(self) -> ClockSnapshot:
        system_now, offset = self._read()
        return ClockSnapshot(
            system_now_utc_ts=int(system_now),
            domain_now_utc_ts=int(system_now) + offset,
            domain_offset_seconds=offset,
        )


_clock_service = ClockService()


def get_clock_service() -> ClockService:
    """時計サービスのシングルトンを返す。"""

    return _clock_service
