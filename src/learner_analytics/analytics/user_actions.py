"""Direct user actions: switching goals and logging non-scoring activity."""

from typing import Any

import structlog

from learner_analytics.models.user import (
    ActiveGoal,
    ActivityLogEntry,
    ActivityType,
    GoalHistoryEntry,
    GoalOutcome,
    utcnow,
)
from learner_analytics.storage.user_store import UserStore, require_user

logger = structlog.get_logger()


async def set_active_goal(store: UserStore, user_id: str, goal: ActiveGoal) -> ActiveGoal:
    """Make ``goal`` the active goal.

    A previous goal for a different role or title is moved to the goal
    history with outcome "switched". ``started_at`` defaults to now.
    """
    user = await require_user(store, user_id)
    now = utcnow()
    previous = user.active_goal
    if previous and previous.role and (previous.role, previous.title) != (goal.role, goal.title):
        user.goals_history.append(
            GoalHistoryEntry(
                role=previous.role,
                title=previous.title,
                achieved_at=now,
                outcome=GoalOutcome.SWITCHED,
            )
        )
    if goal.started_at is None:
        goal = goal.model_copy(update={"started_at": now})
    user.active_goal = goal
    await store.save(user)
    logger.info("active_goal_set", user_id=user_id, role=goal.role, focus_skills=goal.focus_skills)
    return goal


async def log_activity(
    store: UserStore,
    user_id: str,
    activity_type: ActivityType,
    points: int | None = None,
    category: str | None = None,
    meta: dict[str, Any] | None = None,
) -> ActivityLogEntry:
    """Append an entry to the user's activity log. Aggregates are untouched.

    Raises:
        ValueError: for ``problem_solved``, which only the scoring updater records.
    """
    if activity_type == ActivityType.PROBLEM_SOLVED:
        raise ValueError("problem_solved activity is recorded by the scoring pipeline")
    user = await require_user(store, user_id)
    entry = ActivityLogEntry(
        type=activity_type,
        points=points,
        category=category,
        occurred_at=utcnow(),
        meta=meta or {},
    )
    user.activity_log.append(entry)
    await store.save(user)
    logger.info("activity_logged", user_id=user_id, type=activity_type.value)
    return entry
