"""
Habit Streak Service - Streak calculation and heatmap statistics over per-date completion maps
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

HEATMAP_PERIODS = {"7d": 7, "1m": 30, "6m": 180}


class HabitStreakCalculator:
    """Calculates habit streaks and activity heatmaps"""

    @staticmethod
    def calculate_streak(
        completion_dates: Iterable[date],
        grace_days: int = 0,
        as_of_date: Optional[date] = None
    ) -> Tuple[int, int, Optional[date]]:
        """
        Calculate current and best streaks for a habit

        Args:
            completion_dates: Dates when habit was completed
            grace_days: Number of missed days allowed before the current streak breaks
            as_of_date: Calculate streak as of this date (defaults to today)

        Returns:
            (current_streak, best_streak, last_completed_date)
        """
        if as_of_date is None:
            as_of_date = date.today()

        sorted_dates = sorted({d for d in completion_dates if d <= as_of_date})
        if not sorted_dates:
            return 0, 0, None

        current_streak = HabitStreakCalculator._calculate_current_streak(
            sorted_dates, grace_days, as_of_date
        )
        best_streak = HabitStreakCalculator._calculate_best_streak(sorted_dates)

        return current_streak, max(best_streak, current_streak), sorted_dates[-1]

    @staticmethod
    def _calculate_current_streak(
        completion_dates: List[date],
        grace_days: int,
        as_of_date: date
    ) -> int:
        """Calculate current active streak"""
        last_completion = completion_dates[-1]

        # If gap exceeds grace days, no current streak
        if (as_of_date - last_completion).days > grace_days:
            return 0

        streak = 0
        expected_date = last_completion
        for completion_date in reversed(completion_dates):
            if completion_date != expected_date:
                break
            streak += 1
            expected_date = completion_date - timedelta(days=1)

        return streak

    @staticmethod
    def _calculate_best_streak(completion_dates: List[date]) -> int:
        """Calculate the best (longest) run of consecutive days"""
        best_streak = 0
        current_streak = 0
        last_date = None

        for completion_date in completion_dates:
            if last_date is not None and completion_date == last_date + timedelta(days=1):
                current_streak += 1
            else:
                current_streak = 1
            best_streak = max(best_streak, current_streak)
            last_date = completion_date

        return best_streak

    @staticmethod
    def week_progress(completions: Dict[str, bool], as_of_date: Optional[date] = None) -> List[dict]:
        """Completion flags for the last seven days, oldest first"""
        as_of_date = as_of_date or date.today()
        days = []
        for offset in range(6, -1, -1):
            day = as_of_date - timedelta(days=offset)
            days.append({"date": day.isoformat(), "completed": bool(completions.get(day.isoformat()))})
        return days

    @staticmethod
    def build_heatmap(
        habits: List[dict],
        period: str = "1m",
        as_of_date: Optional[date] = None
    ) -> dict:
        """
        Per-day completion counts across habits for a time period

        Each habit is a dict with at least `completions` ({"YYYY-MM-DD": True}) and `color`.
        """
        if period not in HEATMAP_PERIODS:
            raise ValueError(f"Unknown heatmap period '{period}'. Use one of: {', '.join(HEATMAP_PERIODS)}")

        as_of_date = as_of_date or date.today()
        start_date = as_of_date - timedelta(days=HEATMAP_PERIODS[period] - 1)
        total_habits = len(habits)

        days = []
        current_date = start_date
        while current_date <= as_of_date:
            date_str = current_date.isoformat()
            colors = [h.get("color") for h in habits if (h.get("completions") or {}).get(date_str)]
            count = len(colors)
            days.append({
                "date": date_str,
                "count": count,
                "total": total_habits,
                "intensity": count / total_habits if total_habits > 0 else 0,
                "habit_colors": colors,
            })
            current_date += timedelta(days=1)

        current_streak = 0
        for day in reversed(days):
            if day["count"] == 0:
                break
            current_streak += 1

        longest_streak = 0
        run = 0
        for day in days:
            run = run + 1 if day["count"] > 0 else 0
            longest_streak = max(longest_streak, run)

        return {
            "period": period,
            "days": days,
            "total_days": len(days),
            "completed_days": sum(1 for day in days if day["count"] > 0),
            "current_streak": current_streak,
            "longest_streak": longest_streak,
        }
