from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.time_log import MonthlyPunchReport, PunchSummaryRow, TimeLogOut
from taskflow.services.time_tracking import PunchClock
from taskflow.utils.auth import admin_required, get_current_user
from taskflow.utils.clock import get_clock

router = APIRouter(prefix="/time-logs", tags=["Time Logs"])


@router.get("/today", response_model=TimeLogOut)
def today(db: Session = Depends(get_db), clock=Depends(get_clock), current_user: User = Depends(get_current_user)):
    """The caller's punch record for today (empty when not punched in)"""
    return PunchClock(db, clock=clock).today(current_user.id)


@router.post("/punch-in", response_model=TimeLogOut, status_code=status.HTTP_201_CREATED)
def punch_in(db: Session = Depends(get_db), clock=Depends(get_clock), current_user: User = Depends(get_current_user)):
    return PunchClock(db, clock=clock).punch_in(current_user.id)


@router.patch("/punch-out", response_model=TimeLogOut)
def punch_out(db: Session = Depends(get_db), clock=Depends(get_clock), current_user: User = Depends(get_current_user)):
    return PunchClock(db, clock=clock).punch_out(current_user.id)


@router.get("/summary", response_model=List[PunchSummaryRow])
def daily_summary(db: Session = Depends(get_db), clock=Depends(get_clock), current_user: User = Depends(admin_required)):
    return PunchClock(db, clock=clock).daily_summary()


@router.get("/monthly", response_model=MonthlyPunchReport)
def monthly_report(
    month: Optional[str] = None,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(admin_required),
):
    """Punch records for one month (YYYY-MM, default current) grouped by user"""
    return PunchClock(db, clock=clock).monthly_report(month)
