from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.dashboard import DailyView, DashboardStats, MonthlyView, TeamLoadRow, WeeklyView
from taskflow.services.dashboard import DashboardService
from taskflow.utils.auth import get_current_user
from taskflow.utils.clock import get_clock

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
def stats(db: Session = Depends(get_db), clock=Depends(get_clock), current_user: User = Depends(get_current_user)):
    """Task counters, scoped to the caller unless admin"""
    return DashboardService(db, clock).stats(current_user)


@router.get("/daily", response_model=DailyView)
def daily(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return DashboardService(db, clock).daily(current_user, day)


@router.get("/weekly", response_model=WeeklyView)
def weekly(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return DashboardService(db, clock).weekly(current_user, day)


@router.get("/monthly", response_model=MonthlyView)
def monthly(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return DashboardService(db, clock).monthly(current_user, day)


@router.get("/team-load", response_model=List[TeamLoadRow])
def team_load(db: Session = Depends(get_db), clock=Depends(get_clock), current_user: User = Depends(get_current_user)):
    return DashboardService(db, clock).team_load()
