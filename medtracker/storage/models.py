"""
永続化DB（medtracker.db）のORMモデル定義
"""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from medtracker.storage.db import StorageBase


class KeyValueEntry(StorageBase):
    """キー/値の1行。値は JSON テキストをそのまま保持する（スキーマ版数は持たない）。"""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
