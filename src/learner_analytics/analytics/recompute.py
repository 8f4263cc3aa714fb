"""Snapshots rebuilt from a user's problem history and skill trackers.

Each ``recompute_*`` / ``rebuild_*`` coroutine loads the user, overwrites one
derived field wholesale, saves, and returns the new value. The pure
``*_from_*`` helpers do the arithmetic and are idempotent for unchanged input.
"""

from datetime import datetime

import structlog

from learner_analytics.models.user import (
    DailyStat,
    Difficulty,
    DifficultyPerformance,
    LearningPatterns,
    ProblemHistoryEntry,
    RoleMatch,
    SkillEntry,
    TimeOfDayPerformance,
    as_utc,
    date_key,
    utcnow,
)
from learner_analytics.scoring.points import round_half_up
from learner_analytics.storage.user_store import UserStore, require_user

logger = structlog.get_logger()

DEFAULT_ROLE = "Generalist"


def _average(values: list[float]) -> int:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def time_band(hour: int) -> str:
    """Map a UTC hour to morning, afternoon, evening or night."""
    if 5 <= hour < 12:
        return "morning"
    elif 12 <= hour < 17:
        return "afternoon"
    elif 17 <= hour < 22:
        return "evening"
    else:
        return "night"


def daily_stats_from_history(history: list[ProblemHistoryEntry]) -> list[DailyStat]:
    """Group history by UTC day, in order of first appearance."""
    days: dict[str, DailyStat] = {}
    for entry in history:
        key = date_key(entry.solved_at)
        day = days.setdefault(key, DailyStat(date=key))
        day.points += entry.points or 0
        day.problems_solved += 1
    return list(days.values())


def learning_patterns_from_history(history: list[ProblemHistoryEntry]) -> LearningPatterns:
    time_buckets: dict[str, list[float]] = {
        "morning": [], "afternoon": [], "evening": [], "night": [],
    }
    difficulty_buckets: dict[str, list[float]] = {d.value: [] for d in Difficulty}
    category_buckets: dict[str, list[float]] = {}

    for entry in history:
        score = entry.score or 0
        time_buckets[time_band(as_utc(entry.solved_at).hour)].append(score)
        if entry.difficulty in difficulty_buckets:
            difficulty_buckets[entry.difficulty].append(score)
        category_buckets.setdefault(entry.category or "general", []).append(score)

    return LearningPatterns(
        time_of_day_performance=TimeOfDayPerformance(
            **{band: _average(scores) for band, scores in time_buckets.items()}
        ),
        difficulty_performance=DifficultyPerformance(
            **{tier: _average(scores) for tier, scores in difficulty_buckets.items()}
        ),
        category_performance={
            category: _average(scores) for category, scores in category_buckets.items()
        },
    )


def role_match_from_skills(
    skills: list[SkillEntry],
    target_role: str,
    top_n: int = 5,
    now: datetime | None = None,
) -> RoleMatch:
    """Heuristic match: mean average score of the user's strongest skills.

    No role requirements are consulted, so ``gaps`` is always empty.
    """
    top = sorted(skills, key=lambda s: s.average_score or 0, reverse=True)[:top_n]
    return RoleMatch(
        target_role=target_role,
        match_percent=_average([s.average_score or 0 for s in top]),
        gaps=[],
        last_computed_at=now or utcnow(),
    )


async def rebuild_daily_stats(store: UserStore, user_id: str) -> list[DailyStat]:
    user = await require_user(store, user_id)
    user.daily_stats = daily_stats_from_history(user.problem_history)
    await store.save(user)
    logger.info("daily_stats_rebuilt", user_id=user_id, days=len(user.daily_stats))
    return user.daily_stats


async def recompute_learning_patterns(store: UserStore, user_id: str) -> LearningPatterns:
    user = await require_user(store, user_id)
    user.learning_patterns = learning_patterns_from_history(user.problem_history)
    await store.save(user)
    logger.info(
        "learning_patterns_recomputed",
        user_id=user_id,
        history_size=len(user.problem_history),
    )
    return user.learning_patterns


async def recompute_role_match(
    store: UserStore,
    user_id: str,
    target_role: str | None = None,
    top_n: int = 5,
) -> RoleMatch:
    """Recompute the role-match snapshot.

    Args:
        store: User store.
        user_id: User to update.
        target_role: Role to match against. Defaults to the active goal's
            role, then to "Generalist".
        top_n: How many of the strongest skills to average.

    Returns:
        The new snapshot, already persisted.
    """
    user = await require_user(store, user_id)
    role = target_role or (user.active_goal.role if user.active_goal else None) or DEFAULT_ROLE
    user.role_match = role_match_from_skills(user.skill_tracking.skills, role, top_n=top_n)
    await store.save(user)
    logger.info(
        "role_match_recomputed",
        user_id=user_id,
        target_role=role,
        match_percent=user.role_match.match_percent,
    )
    return user.role_match
