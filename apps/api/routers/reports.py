"""
API router for reports: overdue returns and workforce remuneration
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.database.connection import get_db
from shared.services.remuneration_aggregator import RemunerationAggregator
from shared.services.violation_service import ViolationService
from apps.api.schemas import OverdueReturnResponse, RemunerationSummaryResponse

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/overdue-returns", response_model=List[OverdueReturnResponse])
def overdue_returns(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    db: Session = Depends(get_db),
):
    """Confirmed and in-progress orders past their expected return date."""
    return ViolationService(db).overdue_returns(as_of)


@router.get("/worker-remuneration", response_model=RemunerationSummaryResponse)
def worker_remuneration(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
):
    """Attendance pay plus task earnings of every active worker for the period."""
    return RemunerationAggregator(db).remuneration_summary(start_date, end_date)
