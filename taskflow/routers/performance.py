from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.performance import PerformanceDetail, PerformanceScore
from taskflow.services.performance import PerformanceScorer
from taskflow.utils.auth import admin_required

router = APIRouter(prefix="/performance", tags=["Performance"])


@router.get("", response_model=List[PerformanceScore])
def all_scores(db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    """Performance scores for every active team member"""
    return PerformanceScorer(db).all_scores()


@router.get("/{user_id}", response_model=PerformanceDetail)
def user_detail(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return PerformanceScorer(db).detail(user_id)
