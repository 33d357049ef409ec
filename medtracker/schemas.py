"""
API リクエスト/レスポンスの Pydantic モデル

FastAPI エンドポイントで使用するリクエスト/レスポンスのスキーマ定義。
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# --- 服薬記録 ---


class MedicationFieldsRequest(BaseModel):
    """服薬記録の入力項目（追加/更新）。

    空文字の判定はストア側で行い、400 として返す。
    """

    name: str = Field(default="", description="薬の名前")
    dosage: str = Field(default="", description="用量（例: 100mg, 1錠）")
    time: str = Field(default="", description="服用時刻（HH:MM, 24h）")
    frequency: str = Field(default="", description="頻度（daily など自由記述）")


class MedicationResponse(BaseModel):
    """服薬記録（表示用の項目つき）。"""

    id: str
    name: str
    dosage: str
    time: str
    frequency: str
    taken_at: Optional[datetime] = None
    created_at: datetime
    taken_today: bool
    status: str = Field(description="taken / pending")
    time_display: str = Field(description="12時間表記（例: 8:00 AM）")
    last_taken_display: Optional[str] = Field(default=None, description="例: Today at 8:05 AM")


class ProgressResponse(BaseModel):
    """今日の服用進捗。"""

    taken: int
    total: int
    ratio: float
    percentage: int
    streak: int


# --- 時計（動作確認用） ---


class ClockResponse(BaseModel):
    """system/domain 時刻の状態。"""

    system_now_utc_ts: int
    domain_now_utc_ts: int
    domain_offset_seconds: int
    domain_now_local: str


class ClockAdvanceRequest(BaseModel):
    """domain 時刻を進める量。"""

    seconds: int = Field(..., ge=1, description="進める秒数（1以上）")
