"""REST API routes for scoring events and learner analytics."""

import functools
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException

from learner_analytics.analytics.recommendation import get_next_up_recommendation
from learner_analytics.analytics.recompute import (
    rebuild_daily_stats,
    recompute_learning_patterns,
    recompute_role_match,
)
from learner_analytics.analytics.user_actions import log_activity, set_active_goal
from learner_analytics.analytics.views import (
    get_dashboard_summary,
    get_skill_summary,
    get_user_insights,
)
from learner_analytics.config import get_settings
from learner_analytics.models.events import (
    ActivityPayload,
    ProblemSolvedPayload,
    ScoringResult,
    SolvedProblemEvent,
)
from learner_analytics.models.user import (
    ActiveGoal,
    ActivityLogEntry,
    DailyStat,
    LearningPatterns,
    RoleMatch,
)
from learner_analytics.models.views import (
    DashboardSummary,
    Recommendation,
    SkillSummary,
    UserInsights,
)
from learner_analytics.scoring.updater import update_user_scoring
from learner_analytics.storage.user_store import (
    UserNotFoundError,
    UserStore,
    build_user_store,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

T = TypeVar("T")


@functools.lru_cache
def get_user_store() -> UserStore:
    """Process-wide user store built from settings."""
    return build_user_store(get_settings())


async def _or_404(awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    except UserNotFoundError as e:
        logger.info("user_not_found", user_id=e.user_id)
        raise HTTPException(status_code=404, detail="User not found")


@router.post("/users/{user_id}/solved")
async def record_solved_problem(
    user_id: str,
    payload: ProblemSolvedPayload,
    store: UserStore = Depends(get_user_store),
) -> ScoringResult | None:
    """Score a reviewed solution. Returns null when the user does not exist."""
    event = SolvedProblemEvent(user_id=user_id, **payload.model_dump())
    return await update_user_scoring(store, event)


@router.get("/users/{user_id}/skills")
async def skill_summary(user_id: str, store: UserStore = Depends(get_user_store)) -> SkillSummary:
    return await _or_404(get_skill_summary(store, user_id))


@router.get("/users/{user_id}/dashboard")
async def dashboard_summary(
    user_id: str, store: UserStore = Depends(get_user_store)
) -> DashboardSummary:
    settings = get_settings()
    return await _or_404(
        get_dashboard_summary(
            store,
            user_id,
            skill_limit=settings.dashboard_skill_limit,
            daily_stats_window=settings.dashboard_daily_stats_window,
        )
    )


@router.get("/users/{user_id}/insights")
async def user_insights(user_id: str, store: UserStore = Depends(get_user_store)) -> UserInsights:
    return await _or_404(get_user_insights(store, user_id))


@router.get("/users/{user_id}/next-up")
async def next_up(user_id: str, store: UserStore = Depends(get_user_store)) -> Recommendation:
    return await _or_404(get_next_up_recommendation(store, user_id))


@router.post("/users/{user_id}/daily-stats/rebuild")
async def daily_stats_rebuild(
    user_id: str, store: UserStore = Depends(get_user_store)
) -> list[DailyStat]:
    return await _or_404(rebuild_daily_stats(store, user_id))


@router.post("/users/{user_id}/learning-patterns/recompute")
async def learning_patterns_recompute(
    user_id: str, store: UserStore = Depends(get_user_store)
) -> LearningPatterns:
    return await _or_404(recompute_learning_patterns(store, user_id))


@router.post("/users/{user_id}/role-match/recompute")
async def role_match_recompute(
    user_id: str,
    target_role: str | None = None,
    store: UserStore = Depends(get_user_store),
) -> RoleMatch:
    settings = get_settings()
    return await _or_404(
        recompute_role_match(store, user_id, target_role, top_n=settings.role_match_top_n)
    )


@router.put("/users/{user_id}/goal")
async def update_goal(
    user_id: str, goal: ActiveGoal, store: UserStore = Depends(get_user_store)
) -> ActiveGoal:
    return await _or_404(set_active_goal(store, user_id, goal))


@router.post("/users/{user_id}/activity")
async def record_activity(
    user_id: str, payload: ActivityPayload, store: UserStore = Depends(get_user_store)
) -> ActivityLogEntry:
    return await _or_404(
        log_activity(
            store,
            user_id,
            payload.type,
            points=payload.points,
            category=payload.category,
            meta=payload.meta,
        )
    )


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
