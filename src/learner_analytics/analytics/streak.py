"""Consecutive-day streak from daily stats."""

from datetime import date, timedelta

from learner_analytics.models.user import DailyStat


def current_streak(daily_stats: list[DailyStat], today: date) -> int:
    """Count consecutive days, ending today, with at least one solved problem.

    Args:
        daily_stats: Daily stat entries keyed by ``YYYY-MM-DD``.
        today: The day the streak must end on (UTC).

    Returns:
        Streak length in days; 0 when nothing was solved today.
    """
    active_days = {d.date for d in daily_stats if d.problems_solved > 0}
    streak = 0
    day = today
    while day.isoformat() in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak
