"""Read-only views over a user's analytics."""

from datetime import date

from learner_analytics.analytics.streak import current_streak
from learner_analytics.models.user import utcnow
from learner_analytics.models.views import (
    DashboardSummary,
    InsightTotals,
    SkillSummary,
    UserInsights,
)
from learner_analytics.storage.user_store import UserStore, require_user


async def get_skill_summary(store: UserStore, user_id: str) -> SkillSummary:
    user = await require_user(store, user_id)
    stats = user.stats
    tracking = user.skill_tracking
    return SkillSummary(
        total_points=stats.total_points,
        average_score=stats.average_score,
        highest_score=stats.highest_score,
        skills=tracking.skills,
        tech_stack=tracking.tech_stack,
        learning_progress=tracking.learning_progress,
        problems_by_difficulty=stats.problems_by_difficulty,
        problems_by_category=stats.problems_by_category,
    )


async def get_dashboard_summary(
    store: UserStore,
    user_id: str,
    skill_limit: int = 5,
    daily_stats_window: int = 30,
    today: date | None = None,
) -> DashboardSummary:
    """Dashboard card data.

    Args:
        store: User store.
        user_id: User to summarise.
        skill_limit: Number of most recently touched skills to include.
        daily_stats_window: Number of trailing daily stat entries to include.
        today: UTC day the streak is measured against; defaults to today.

    Returns:
        DashboardSummary for the user.
    """
    user = await require_user(store, user_id)
    today = today or utcnow().date()
    recent_skills = sorted(
        user.skill_tracking.skills, key=lambda s: s.last_updated, reverse=True
    )[:skill_limit]
    return DashboardSummary(
        total_points=user.stats.total_points,
        average_score=user.stats.average_score,
        highest_score=user.stats.highest_score,
        current_streak=current_streak(user.daily_stats, today),
        skills=recent_skills,
        daily_stats=user.daily_stats[-daily_stats_window:] if daily_stats_window > 0 else [],
        role_match=user.role_match,
        active_goal=user.active_goal,
    )


async def get_user_insights(store: UserStore, user_id: str) -> UserInsights:
    user = await require_user(store, user_id)
    stats = user.stats
    return UserInsights(
        totals=InsightTotals(
            points=stats.total_points,
            average_score=stats.average_score,
            highest_score=stats.highest_score,
            problems_solved=stats.problems_solved,
        ),
        problems_by_difficulty=stats.problems_by_difficulty,
        problems_by_category=stats.problems_by_category,
        daily_stats=user.daily_stats,
        learning_patterns=user.learning_patterns,
        role_match=user.role_match,
        comparisons=user.comparisons,
        active_goal=user.active_goal,
    )
