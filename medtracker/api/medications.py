"""
/medications エンドポイント

服薬記録の一覧/追加/更新/削除/服用トグルと、今日の進捗を提供する。

注意:
- エンドポイントは同期 def（スレッドプールで動く）。ストア側のロックで直列化する。
- 変更後は medications.changed を配信し、表示側に再描画を促す。
"""

from __future__ import annotations

from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status

from medtracker import schemas
from medtracker.app_bootstrap.dependencies import get_clock_service_dep, get_medication_store_dep
from medtracker.core.clock import ClockService
from medtracker.errors import NotFoundError, PersistenceError, ValidationError
from medtracker.medications.models import MedicationRecord
from medtracker.medications.presentation import describe_record
from medtracker.medications.store import MedicationStore
from medtracker.runtime import event_stream

logger = __import__("logging").getLogger(__name__)

router = APIRouter()


def _to_response(record: MedicationRecord, clock: ClockService) -> schemas.MedicationResponse:
    return schemas.MedicationResponse(**describe_record(record, clock.now_local()))


def _raise_http(exc: Exception) -> NoReturn:
    """ストアの例外を HTTPException へ変換する。"""

    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, PersistenceError):
        logger.error("medication persist failed: %s", str(exc))
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    raise exc


def _publish_changed(action: str, medication_id: str) -> None:
    event_stream.publish(
        type="medications.changed",
        data={"action": str(action), "medication_id": str(medication_id)},
    )


@router.get("/medications", response_model=List[schemas.MedicationResponse])
def list_medications(
    store: MedicationStore = Depends(get_medication_store_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> List[schemas.MedicationResponse]:
    """服薬記録を挿入順で返す。"""
    now = clock.now_local()
    return [schemas.MedicationResponse(**describe_record(r, now)) for r in store.list()]


@router.post("/medications", response_model=schemas.MedicationResponse, status_code=status.HTTP_201_CREATED)
def create_medication(
    request: schemas.MedicationFieldsRequest,
    store: MedicationStore = Depends(get_medication_store_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.MedicationResponse:
    """服薬記録を追加する。"""
    try:
        record = store.add(request.model_dump(), now=clock.now_local())
    except (ValidationError, PersistenceError) as exc:
        _raise_http(exc)
    _publish_changed("added", record.id)
    return _to_response(record, clock)


@router.get("/medications/{medication_id}", response_model=schemas.MedicationResponse)
def get_medication(
    medication_id: str,
    store: MedicationStore = Depends(get_medication_store_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.MedicationResponse:
    """服薬記録を1件返す。"""
    try:
        record = store.get(medication_id)
    except NotFoundError as exc:
        _raise_http(exc)
    return _to_response(record, clock)


@router.put("/medications/{medication_id}", response_model=schemas.MedicationResponse)
def update_medication(
    medication_id: str,
    request: schemas.MedicationFieldsRequest,
    store: MedicationStore = Depends(get_medication_store_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.MedicationResponse:
    """服薬記録の入力項目を更新する（服用状態は保持）。"""
    try:
        record = store.update(medication_id, request.model_dump())
    except (NotFoundError, ValidationError, PersistenceError) as exc:
        _raise_http(exc)
    _publish_changed("updated", record.id)
    return _to_response(record, clock)


@router.delete("/medications/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medication(
    medication_id: str,
    store: MedicationStore = Depends(get_medication_store_dep),
) -> Response:
    """服薬記録を削除する。"""
    try:
        record = store.remove(medication_id)
    except (NotFoundError, PersistenceError) as exc:
        _raise_http(exc)
    _publish_changed("removed", record.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/medications/{medication_id}/toggle", response_model=schemas.MedicationResponse)
def toggle_medication(
    medication_id: str,
    store: MedicationStore = Depends(get_medication_store_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.MedicationResponse:
    """服用済み/未服用を切り替える。"""
    now = clock.now_local()
    try:
        record = store.toggle_taken(medication_id, now)
    except (NotFoundError, PersistenceError) as exc:
        _raise_http(exc)
    _publish_changed("toggled", record.id)
    return schemas.MedicationResponse(**describe_record(record, now))


@router.get("/progress", response_model=schemas.ProgressResponse)
def get_progress(
    store: MedicationStore = Depends(get_medication_store_dep),
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.ProgressResponse:
    """今日の服用進捗を返す。"""
    summary = store.progress(clock.now_local())
    return schemas.ProgressResponse(
        taken=summary.taken,
        total=summary.total,
        ratio=summary.ratio,
        percentage=summary.percentage,
        streak=summary.streak,
    )
