from datetime import datetime
from typing import Dict, Any
from sqlalchemy.orm import Session
from lumi.tools.base import BaseTool, ToolResult
from lumi.models.habit import Habit, HabitCompletion
from lumi.services.habit_streaks import HabitStreakCalculator
from lumi.utils.dates import local_today
import logging

logger = logging.getLogger(__name__)


def habit_summary(habit: Habit, as_of_date=None) -> Dict[str, Any]:
    """Habit with its completion map, this week's progress and streaks"""
    as_of_date = as_of_date or local_today()
    completions = habit.completions
    current, best, last = HabitStreakCalculator.calculate_streak(
        [row.date for row in habit.completion_rows], as_of_date=as_of_date
    )
    return {
        "id": habit.id,
        "title": habit.title,
        "color": habit.color,
        "completions": completions,
        "week_progress": HabitStreakCalculator.week_progress(completions, as_of_date),
        "current_streak": current,
        "best_streak": best,
        "last_completed": last.isoformat() if last else None,
        "type": "habit",
    }


class AddHabitTool(BaseTool):
    """Tool for creating habits"""

    @property
    def name(self) -> str:
        return "add_habit"

    @property
    def description(self) -> str:
        return "Start tracking a new daily habit."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Habit name"},
                "color": {"type": "string", "description": "Hex color used in the heatmap"}
            },
            "required": ["title"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        title = kwargs.get("title")
        if not title or not title.strip():
            return ToolResult(success=False, message="Habit title is required")

        habit = Habit(title=title.strip())
        if kwargs.get("color"):
            habit.color = kwargs["color"]
        db.add(habit)
        db.commit()
        db.refresh(habit)

        return ToolResult(
            success=True,
            data={"habit": habit_summary(habit)},
            message=f"Now tracking habit: {habit.title}"
        )


class ListHabitsTool(BaseTool):
    """Tool for listing habits with streaks"""

    @property
    def name(self) -> str:
        return "list_habits"

    @property
    def description(self) -> str:
        return "List tracked habits with this week's progress and current streaks."

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        today = local_today()
        habits = db.query(Habit).order_by(Habit.created_at).all()
        return ToolResult(
            success=True,
            data={"habits": [habit_summary(h, today) for h in habits]},
            message=f"Found {len(habits)} habits"
        )


class ToggleHabitTool(BaseTool):
    """Tool for marking a habit done (or undone) for a day"""

    @property
    def name(self) -> str:
        return "toggle_habit"

    @property
    def description(self) -> str:
        return "Mark a habit as completed for a day, or clear it if it was already completed."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "habit_id": {"type": "string", "description": "The habit id"},
                "date": {"type": "string", "description": "Day to toggle (YYYY-MM-DD). Defaults to today."}
            },
            "required": ["habit_id"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        habit = db.query(Habit).filter(Habit.id == kwargs.get("habit_id")).first()
        if not habit:
            return ToolResult(success=False, message="Habit not found")

        day = local_today()
        if kwargs.get("date"):
            try:
                day = datetime.strptime(kwargs["date"], "%Y-%m-%d").date()
            except ValueError:
                return ToolResult(success=False, message="Invalid date format. Please use YYYY-MM-DD format.")

        existing = db.query(HabitCompletion).filter(
            HabitCompletion.habit_id == habit.id,
            HabitCompletion.date == day,
        ).first()

        if existing:
            habit.completion_rows.remove(existing)
            completed = False
        else:
            habit.completion_rows.append(HabitCompletion(date=day))
            completed = True

        db.commit()
        db.refresh(habit)

        return ToolResult(
            success=True,
            data={"habit": habit_summary(habit), "date": day.isoformat(), "completed": completed},
            message=f"{habit.title} {'completed' if completed else 'cleared'} for {day.isoformat()}"
        )
