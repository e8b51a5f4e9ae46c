from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from lumi.models.task import Task
from lumi.utils.dates import local_now, to_local

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
TIME_LABELS = {"morning": "Morning", "afternoon": "Afternoon", "evening": "Evening", "night": "Night"}
STREAK_LOOKBACK_DAYS = 30


def _time_of_day(hour: int) -> str:
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 22:
        return "evening"
    return "night"


def productivity_patterns(tasks: List[Task], now: Optional[datetime] = None) -> Dict[str, Any]:
    """When the user gets things done: weekday and time-of-day spread plus a daily streak"""
    now = to_local(now) if now else local_now()

    day_of_week = [0] * 7
    time_of_day = {"morning": 0, "afternoon": 0, "evening": 0, "night": 0}
    daily_completions: Dict[str, int] = {}

    for task in tasks:
        if not task.completed_at:
            continue
        completed = to_local(task.completed_at)
        day_of_week[completed.weekday()] += 1
        time_of_day[_time_of_day(completed.hour)] += 1
        key = completed.date().isoformat()
        daily_completions[key] = daily_completions.get(key, 0) + 1

    current_streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        if daily_completions.get((now.date() - timedelta(days=offset)).isoformat()):
            current_streak += 1
        else:
            break

    best_day = DAY_NAMES[day_of_week.index(max(day_of_week))]
    best_time_key = "morning"
    for key, count in time_of_day.items():
        if count > time_of_day[best_time_key]:
            best_time_key = key

    return {
        "day_of_week": day_of_week,
        "day_names": DAY_NAMES,
        "time_of_day": time_of_day,
        "current_streak": current_streak,
        "best_day": best_day,
        "best_time": TIME_LABELS[best_time_key],
        "total_tasks": len(tasks),
        "avg_per_day": f"{len(tasks) / 30:.1f}" if tasks else "0",
    }


def sort_tasks(tasks: List[Task]) -> List[Task]:
    """Dated tasks first by earliest due (or reminder) date, then undated by newest creation"""

    def relevant_date(task: Task) -> Optional[datetime]:
        return task.due_date or task.reminder_date

    dated = [t for t in tasks if relevant_date(t)]
    undated = [t for t in tasks if not relevant_date(t)]

    dated.sort(key=relevant_date)
    undated.sort(key=lambda t: t.created_at.timestamp() if t.created_at else 0, reverse=True)
    return dated + undated
