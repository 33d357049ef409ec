from __future__ import annotations

import pytest

from medtracker.core.clock import ClockService


def test_advance_and_reset():
    clock = ClockService()
    assert clock.get_domain_offset_seconds() == 0

    assert clock.advance_domain_seconds(seconds=60) == 60
    assert clock.advance_domain_seconds(seconds=30) == 90

    snap = clock.snapshot()
    assert snap.domain_now_utc_ts - snap.system_now_utc_ts == 90

    clock.reset_domain_offset()
    assert clock.get_domain_offset_seconds() == 0


@pytest.mark.parametrize("seconds", [0, -5])
def test_advance_rejects_non_positive(seconds):
    with pytest.raises(ValueError):
        ClockService().advance_domain_seconds(seconds=seconds)


def test_now_local_is_aware_and_follows_offset():
    clock = ClockService()
    before = clock.now_local()
    clock.advance_domain_seconds(seconds=3600)
    after = clock.now_local()

    assert before.tzinfo is not None
    assert (after - before).total_seconds() >= 3600
