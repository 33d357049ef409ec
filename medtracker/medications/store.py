"""
服薬ストア（MedicationStore）

服薬記録のリストを保持する唯一の持ち主。
追加/更新/削除/服用トグルのたびに、リスト全体を1キーへ上書き保存する。

方針:
- 差分保存やトランザクションログは持たない（最後の書き込みが勝つ）。
- 時刻に依存する操作は now を引数で受け取る（壁時計を直接読まない）。
- 保存失敗は PersistenceError として呼び出し側へ返す（メモリ側は先行したまま）。
"""

from __future__ import annotations

import json
import logging
import math
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional

from medtracker.config import DEFAULT_STORAGE_KEY
from medtracker.core import common_utils, time_utils
from medtracker.errors import NotFoundError, PersistenceError, ValidationError
from medtracker.medications.models import (
    REQUIRED_FIELDS,
    MedicationFields,
    MedicationRecord,
    ProgressSummary,
)
from medtracker.storage.kv import KeyValueStorage


logger = logging.getLogger(__name__)


def dump_records(records: Iterable[MedicationRecord]) -> str:
    """記録リストを保存用 JSON テキストにする。"""
    return common_utils.json_dumps([r.to_dict() for r in records])


def parse_records(text: str) -> list[MedicationRecord]:
    """
    保存用 JSON テキストを記録リストに戻す。

    JSON 配列でない/記録として読めない場合は PersistenceError。
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"stored medications are not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise PersistenceError(f"stored medications must be a JSON array, got {type(raw).__name__}")

    records: list[MedicationRecord] = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise PersistenceError(f"stored medication {idx} is not an object")
        try:
            records.append(MedicationRecord.from_dict(entry))
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"stored medication {idx} is invalid: {exc}") from exc
    return records


def normalize_fields(fields: Mapping[str, Any] | MedicationFields) -> MedicationFields:
    """
    入力項目を検証して MedicationFields にする。

    - 4項目すべて必須（前後の空白は除去してから判定）
    - time は HH:MM（24h）
    """
    if isinstance(fields, MedicationFields):
        fields = {k: getattr(fields, k) for k in REQUIRED_FIELDS}

    values = {k: str(fields.get(k) or "").strip() for k in REQUIRED_FIELDS}
    missing = [k for k in REQUIRED_FIELDS if not values[k]]
    if missing:
        raise ValidationError(f"required field(s) missing: {', '.join(missing)}", fields=missing)
    if not time_utils.is_valid_time_of_day(values["time"]):
        raise ValidationError(f"time must be HH:MM (24h), got {values['time']!r}", fields=["time"])
    return MedicationFields(**values)


def _new_id() -> str:
    return uuid.uuid4().hex


class MedicationStore:
    """
    服薬記録ストア。

    リストは挿入順を保つ。外へ返す記録は不変なので、呼び出し側が書き換えることはできない。
    同期エンドポイント（スレッドプール）とリマインダー評価（イベントループ）から呼ばれるため、
    リストの読み書きと保存は1つのロックの内側で行う。
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._storage_key = str(storage_key)
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self._records: list[MedicationRecord] = []
        # 削除済みも含め、このプロセスで払い出した/読み込んだ id
        self._issued_ids: set[str] = set()

    # --- 永続化 ---

    def load(self) -> list[MedicationRecord]:
        """
        保存済みリストを読み込んでメモリ上のリストを置き換える。

        キーが無ければ空リスト。
        """
        try:
            text = self._storage.get_item(self._storage_key)
        except PersistenceError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise PersistenceError(f"failed to read {self._storage_key}: {exc}") from exc

        records = [] if text is None else parse_records(text)
        with self._lock:
            self._records = records
            self._issued_ids.update(r.id for r in records)
        logger.info("medications loaded count=%s key=%s", len(records), self._storage_key)
        return self.list()

    def save(self) -> str:
        """リスト全体を保存し、保存した JSON テキストを返す。"""
        with self._lock:
            text = dump_records(self._records)
            try:
                self._storage.set_item(self._storage_key, text)
            except PersistenceError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise PersistenceError(f"failed to write {self._storage_key}: {exc}") from exc
        return text

    # --- 参照 ---

    def list(self) -> list[MedicationRecord]:
        """記録を挿入順で返す（呼び出しごとに新しいリスト）。"""
        with self._lock:
            return list(self._records)

    def get(self, medication_id: str) -> MedicationRecord:
        """id の記録を返す。無ければ NotFoundError。"""
        with self._lock:
            return self._records[self._index_of(medication_id)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # --- 変更 ---

    def add(self, fields: Mapping[str, Any] | MedicationFields, *, now: Optional[datetime] = None) -> MedicationRecord:
        """
        記録を追加して保存する。

        id は新規採番、created_at は now（省略時は現在のローカル時刻）、taken_at は None。
        """
        normalized = normalize_fields(fields)
        created_at = now if now is not None else datetime.now().astimezone()

        with self._lock:
            # --- 削除済みの id も再利用しない（衝突時は取り直す） ---
            medication_id = str(self._id_factory())
            while medication_id in self._issued_ids:
                medication_id = str(self._id_factory())
            self._issued_ids.add(medication_id)

            record = MedicationRecord(
                id=medication_id,
                name=normalized.name,
                dosage=normalized.dosage,
                time=normalized.time,
                frequency=normalized.frequency,
                created_at=created_at,
                taken_at=None,
            )
            self._records.append(record)
            self.save()
        logger.info("medication added id=%s name=%s time=%s", record.id, record.name, record.time)
        return record

    def update(self, medication_id: str, fields: Mapping[str, Any] | MedicationFields) -> MedicationRecord:
        """入力項目を差し替えて保存する（id/created_at/taken_at は保持）。"""
        with self._lock:
            idx = self._index_of(medication_id)
            normalized = normalize_fields(fields)
            record = self._records[idx].with_fields(normalized)
            self._records[idx] = record
            self.save()
        logger.info("medication updated id=%s", record.id)
        return record

    def remove(self, medication_id: str) -> MedicationRecord:
        """記録を削除して保存する。削除した記録を返す。"""
        with self._lock:
            idx = self._index_of(medication_id)
            record = self._records.pop(idx)
            self.save()
        logger.info("medication removed id=%s", record.id)
        return record

    def toggle_taken(self, medication_id: str, now: datetime) -> MedicationRecord:
        """
        服用済み/未服用を切り替えて保存する。

        - 今日服用済み: taken_at を消す
        - それ以外（未服用、前日以前に服用、now より未来の taken_at）: taken_at = now
        """
        with self._lock:
            idx = self._index_of(medication_id)
            current = self._records[idx]
            if self.is_taken_today(current, now):
                record = current.with_taken_at(None)
            else:
                record = current.with_taken_at(now)
            self._records[idx] = record
            self.save()
        logger.info("medication toggled id=%s taken=%s", record.id, record.taken_at is not None)
        return record

    # --- 進捗 ---

    @staticmethod
    def is_taken_today(record: MedicationRecord, now: datetime) -> bool:
        """
        taken_at が now と同じローカル暦日なら True。

        domain 時刻を戻した後に残る「now より未来の taken_at」は服用済みと数えない。
        """
        taken_at = record.taken_at
        if taken_at is None or time_utils.is_after(taken_at, now):
            return False
        return time_utils.is_same_local_day(taken_at, now)

    def completion_ratio(self, now: datetime) -> float:
        """今日服用済みの割合（0.0..1.0）。空なら 0.0。"""
        return self.progress(now).ratio

    def progress(self, now: datetime) -> ProgressSummary:
        """今日の服用進捗（件数/割合/百分率/連続日数）を返す。"""
        records = self.list()
        total = len(records)
        taken = sum(1 for r in records if self.is_taken_today(r, now))
        ratio = (taken / total) if total > 0 else 0.0
        # NOTE: 百分率は 0.5 切り上げ（銀行丸めにしない）。
        percentage = int(math.floor(ratio * 100 + 0.5))
        streak = 1 if (total > 0 and taken == total) else 0
        return ProgressSummary(taken=taken, total=total, ratio=ratio, percentage=percentage, streak=streak)

    # --- 内部 ---

    def _index_of(self, medication_id: str) -> int:
        mid = str(medication_id)
        for idx, record in enumerate(self._records):
            if record.id == mid:
                return idx
        raise NotFoundError(mid)
