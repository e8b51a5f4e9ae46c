from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from lumi.db.session import get_db
from lumi.models.habit import Habit
from lumi.services.habit_streaks import HabitStreakCalculator
from lumi.utils.dates import local_today
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/heatmap")
async def habit_heatmap(
    period: str = Query("1m", description="7d, 1m or 6m"),
    db: Session = Depends(get_db)
):
    """Daily completion heatmap across all habits"""
    habits = db.query(Habit).all()
    habit_maps = [{"id": h.id, "color": h.color, "completions": h.completions} for h in habits]

    try:
        return HabitStreakCalculator.build_heatmap(habit_maps, period=period, as_of_date=local_today())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
