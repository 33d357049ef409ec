"""
/control エンドポイント

domain 時刻（ClockService）の参照と操作を受け付ける。
リマインダーの発火を実時間待ちなしで確認するための管理用API。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from medtracker import schemas
from medtracker.app_bootstrap.dependencies import get_clock_service_dep
from medtracker.core.clock import ClockService

logger = __import__("logging").getLogger(__name__)

router = APIRouter()


def _clock_response(clock: ClockService) -> schemas.ClockResponse:
    snap = clock.snapshot()
    return schemas.ClockResponse(
        system_now_utc_ts=snap.system_now_utc_ts,
        domain_now_utc_ts=snap.domain_now_utc_ts,
        domain_offset_seconds=snap.domain_offset_seconds,
        domain_now_local=clock.now_local().isoformat(timespec="seconds"),
    )


@router.get("/control/clock", response_model=schemas.ClockResponse)
def get_clock(clock: ClockService = Depends(get_clock_service_dep)) -> schemas.ClockResponse:
    """system/domain 時刻を返す。"""
    return _clock_response(clock)


@router.post("/control/clock/advance", response_model=schemas.ClockResponse)
def advance_clock(
    request: schemas.ClockAdvanceRequest,
    clock: ClockService = Depends(get_clock_service_dep),
) -> schemas.ClockResponse:
    """domain 時刻を進める。"""
    try:
        offset = clock.advance_domain_seconds(seconds=request.seconds)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.info("domain clock advanced seconds=%s offset=%s", request.seconds, offset)
    return _clock_response(clock)


@router.post("/control/clock/reset", response_model=schemas.ClockResponse)
def reset_clock(clock: ClockService = Depends(get_clock_service_dep)) -> schemas.ClockResponse:
    """domain 時刻オフセットを0へ戻す。"""
    clock.reset_domain_offset()
    logger.info("domain clock reset")
    return _clock_response(clock)
