"""Operational endpoints for the auto-confirmation sweep."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from stay_booking.dependencies import get_db_engine
from stay_booking.services.auto_confirm import run_auto_confirm_sweep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/auto-confirm/run")
def run_auto_confirm_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """
    Run one auto-confirmation pass now, outside the regular schedule.

    Returns:
        dict: Candidate count and the IDs confirmed, skipped and failed
    """
    try:
        result = run_auto_confirm_sweep(engine)
        return {
            "candidates": result.candidates,
            "confirmed": result.confirmed,
            "skipped": result.skipped,
            "failed": result.failed,
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("auto_confirm_run_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
