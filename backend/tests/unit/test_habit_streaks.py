"""Tests for habit streaks and the activity heatmap."""

from datetime import date, timedelta

import pytest

from lumi.services.habit_streaks import HabitStreakCalculator


TODAY = date(2025, 10, 20)


def days_ago(*offsets):
    return [TODAY - timedelta(days=o) for o in offsets]


class TestCalculateStreak:

    def test_no_completions(self):
        assert HabitStreakCalculator.calculate_streak([], as_of_date=TODAY) == (0, 0, None)

    def test_consecutive_days_ending_today(self):
        current, best, last = HabitStreakCalculator.calculate_streak(days_ago(0, 1, 2), as_of_date=TODAY)

        assert current == 3
        assert best == 3
        assert last == TODAY

    def test_streak_ending_yesterday_breaks_without_grace(self):
        current, best, _ = HabitStreakCalculator.calculate_streak(days_ago(1, 2), as_of_date=TODAY)

        assert current == 0
        assert best == 2

    def test_grace_day_keeps_streak_alive(self):
        current, _, _ = HabitStreakCalculator.calculate_streak(days_ago(1, 2), grace_days=1, as_of_date=TODAY)

        assert current == 2

    def test_best_streak_from_earlier_run(self):
        current, best, _ = HabitStreakCalculator.calculate_streak(
            days_ago(0, 5, 6, 7, 8), as_of_date=TODAY
        )

        assert current == 1
        assert best == 4

    def test_duplicates_and_future_dates_ignored(self):
        dates = days_ago(0, 0, 1) + [TODAY + timedelta(days=3)]
        current, best, last = HabitStreakCalculator.calculate_streak(dates, as_of_date=TODAY)

        assert (current, best, last) == (2, 2, TODAY)


class TestWeekProgress:

    def test_seven_days_oldest_first(self):
        completions = {TODAY.isoformat(): True, (TODAY - timedelta(days=6)).isoformat(): True}
        week = HabitStreakCalculator.week_progress(completions, TODAY)

        assert len(week) == 7
        assert week[0] == {"date": "2025-10-14", "completed": True}
        assert week[-1] == {"date": "2025-10-20", "completed": True}
        assert sum(d["completed"] for d in week) == 2


class TestBuildHeatmap:

    def habits(self):
        return [
            {"color": "#FFB3BA", "completions": {d.isoformat(): True for d in days_ago(0, 1, 2, 10)}},
            {"color": "#BAE1FF", "completions": {d.isoformat(): True for d in days_ago(0, 4)}},
        ]

    def test_period_lengths(self):
        assert HabitStreakCalculator.build_heatmap([], "7d", TODAY)["total_days"] == 7
        assert HabitStreakCalculator.build_heatmap([], "1m", TODAY)["total_days"] == 30
        assert HabitStreakCalculator.build_heatmap([], "6m", TODAY)["total_days"] == 180

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            HabitStreakCalculator.build_heatmap([], "1y", TODAY)

    def test_day_counts_and_intensity(self):
        heatmap = HabitStreakCalculator.build_heatmap(self.habits(), "7d", TODAY)
        today = heatmap["days"][-1]

        assert today["date"] == TODAY.isoformat()
        assert today["count"] == 2
        assert today["total"] == 2
        assert today["intensity"] == 1.0
        assert today["habit_colors"] == ["#FFB3BA", "#BAE1FF"]

    def test_streak_stats(self):
        heatmap = HabitStreakCalculator.build_heatmap(self.habits(), "1m", TODAY)

        assert heatmap["current_streak"] == 3
        assert heatmap["longest_streak"] == 3
        assert heatmap["completed_days"] == 5

    def test_no_habits_zero_intensity(self):
        heatmap = HabitStreakCalculator.build_heatmap([], "7d", TODAY)

        assert all(day["intensity"] == 0 for day in heatmap["days"])
        assert heatmap["current_streak"] == 0
