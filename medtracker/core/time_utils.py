"""
時刻ユーティリティ

服薬記録で扱う「時刻（HH:MM）」と「日付境界（ローカル暦日）」の判定をまとめる。

注意:
- ここでの「ローカル」は実行環境のローカルタイムゾーンを指す。
- naive な datetime はローカルの壁時計時刻として扱う（変換しない）。
- aware な datetime はローカルタイムゾーンへ変換してから日付/分を取り出す。
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

# HH:MM（24時間表記）
_TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_valid_time_of_day(value: str) -> bool:
    """HH:MM（24h）形式なら True を返す。"""
    return bool(_TIME_OF_DAY_RE.match(str(value or "")))


def to_local(dt: datetime) -> datetime:
    """datetime をローカル壁時計の datetime にそろえる。"""

    # --- naive はそのまま（既にローカル扱い） ---
    if dt.tzinfo is None:
        return dt
    return dt.astimezone()


def local_date(dt: datetime) -> date:
    """ローカル暦日を返す。"""
    return to_local(dt).date()


def is_same_local_day(a: datetime, b: datetime) -> bool:
    """2つの時刻が同じローカル暦日に属するかを返す。"""

    # --- naive/aware が混ざる場合は aware 側をローカルへ寄せて比較する ---
    return local_date(a) == local_date(b)


def minute_of_day(dt: datetime) -> str:
    """ローカル時刻を分単位に切り捨てた HH:MM を返す。"""
    return to_local(dt).strftime("%H:%M")


def parse_iso8601(value: str) -> datetime:
    """
    ISO 8601 文字列を datetime に変換する。

    ブラウザ由来の "Z" サフィックス（UTC）も受け付ける。
    不正な形式なら ValueError。
    """
    s = str(value or "").strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def format_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """datetime を ISO 8601 文字列にする（None は None）。"""
    if dt is None:
        return None
    return dt.isoformat()


def format_time_12h(time_of_day: str) -> str:
    """
    HH:MM（24h）を 12時間表記へ変換する。

    例:
    - "08:00" -> "8:00 AM"
    - "00:30" -> "12:30 AM"
    - "13:05" -> "1:05 PM"
    """
    hours, minutes = str(time_of_day).split(":", 1)
    hour = int(hours)
    ampm = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minutes} {ampm}"


def format_datetime_display(dt: datetime, now: datetime) -> str:
    """
    服用時刻の表示用文字列を返す。

    - 同じローカル暦日: "Today at 8:05 AM"
    - それ以外: "2026-10-18 at 8:05 AM"
    """
    local_dt = to_local(dt)
    time_text = format_time_12h(local_dt.strftime("%H:%M"))
    if is_same_local_day(local_dt, now):
        return f"Today at {time_text}"
    return f"{local_dt.date().isoformat()} at {time_text}"


def is_after(a: datetime, b: datetime) -> bool:
    """a が b より後の時刻なら True（naive はローカル時刻として比較する）。"""
    return a.astimezone() > b.astimezone()
