"""
Unit tests for the auto-confirm scheduler lifecycle.
"""

from __future__ import annotations

from typing import Generator
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.engine import Engine

from stay_booking.scheduler import JOB_ID, AutoConfirmScheduler


@pytest.fixture
def scheduler() -> Generator[AutoConfirmScheduler, None, None]:
    sched = AutoConfirmScheduler(Mock(spec=Engine), interval_seconds=3600)
    yield sched
    sched.stop(wait=False)


@pytest.mark.unit
def test_start_registers_single_interval_job(scheduler: AutoConfirmScheduler) -> None:
    scheduler.start()

    assert scheduler.running
    job = scheduler._scheduler.get_job(JOB_ID)
    assert job is not None
    assert job.max_instances == 1
    assert job.coalesce is True


@pytest.mark.unit
def test_start_twice_keeps_one_scheduler(scheduler: AutoConfirmScheduler) -> None:
    scheduler.start()
    first = scheduler._scheduler

    scheduler.start()

    assert scheduler._scheduler is first


@pytest.mark.unit
def test_stop_shuts_down(scheduler: AutoConfirmScheduler) -> None:
    scheduler.start()
    scheduler.stop(wait=False)

    assert not scheduler.running


@pytest.mark.unit
def test_stop_before_start_is_harmless() -> None:
    sched = AutoConfirmScheduler(Mock(spec=Engine))

    sched.stop()

    assert not sched.running


@pytest.mark.unit
def test_run_once_invokes_sweep_with_engine(scheduler: AutoConfirmScheduler) -> None:
    with patch("stay_booking.scheduler.run_auto_confirm_sweep") as mock_sweep:
        scheduler.run_once()

    mock_sweep.assert_called_once_with(scheduler.engine)


@pytest.mark.unit
def test_run_once_logs_and_swallows_failures(scheduler: AutoConfirmScheduler) -> None:
    with patch(
        "stay_booking.scheduler.run_auto_confirm_sweep", side_effect=RuntimeError("db down")
    ):
        scheduler.run_once()
