"""Apply a solved-problem event to a user's scoring aggregates."""

from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

import structlog

from learner_analytics.models.events import ScoringResult, SolvedProblemEvent
from learner_analytics.models.user import (
    ActivityLogEntry,
    ActivityType,
    DailyStat,
    Difficulty,
    DifficultyBucket,
    ProblemHistoryEntry,
    SkillEntry,
    TechEntry,
    TopicEntry,
    UserRecord,
    as_utc,
    date_key,
    utcnow,
)
from learner_analytics.scoring.extractor import extract_skills
from learner_analytics.scoring.points import calculate_points, running_average
from learner_analytics.storage.user_store import UserStore

logger = structlog.get_logger()

_KNOWN_DIFFICULTIES = {d.value for d in Difficulty}

TrackerEntry = TypeVar("TrackerEntry", SkillEntry, TechEntry, TopicEntry)


def _fold_bucket(bucket: DifficultyBucket | None, score: float, points: int) -> DifficultyBucket:
    bucket = bucket or DifficultyBucket()
    return DifficultyBucket(
        solved=bucket.solved + 1,
        average_score=running_average(bucket.average_score, bucket.solved, score),
        total_points=bucket.total_points + points,
    )


def _upsert(
    entries: list[TrackerEntry],
    matches: Callable[[TrackerEntry], bool],
    create: Callable[[], TrackerEntry],
) -> TrackerEntry:
    for entry in entries:
        if matches(entry):
            return entry
    entry = create()
    entries.append(entry)
    return entry


def _credit(entry: SkillEntry | TechEntry | TopicEntry, score: float, points: int, now: datetime) -> None:
    entry.average_score = running_average(entry.average_score, entry.problems_solved, score)
    entry.problems_solved += 1
    entry.total_points += points
    entry.last_updated = now


def apply_solved_problem(
    user: UserRecord,
    event: SolvedProblemEvent,
    now: datetime | None = None,
) -> int:
    """Mutate ``user`` in memory for one solved problem.

    Args:
        user: Record to update. Nothing is persisted here.
        event: The solved problem.
        now: Clock override; defaults to the current UTC time.

    Returns:
        Points awarded.
    """
    now = now or utcnow()
    score = event.score or 0
    solved_at = as_utc(event.solved_at) if event.solved_at else now
    points = calculate_points(event.difficulty, score)

    stats = user.stats
    stats.total_points += points
    stats.highest_score = max(stats.highest_score, score)
    stats.average_score = running_average(stats.average_score, stats.problems_solved, score)
    stats.problems_solved += 1

    if event.difficulty in _KNOWN_DIFFICULTIES:
        stats.problems_by_difficulty[event.difficulty] = _fold_bucket(
            stats.problems_by_difficulty.get(event.difficulty), score, points
        )
    stats.problems_by_category[event.category] = _fold_bucket(
        stats.problems_by_category.get(event.category), score, points
    )

    user.problem_history.append(
        ProblemHistoryEntry(
            problem_id=event.problem_id,
            analysis_id=event.analysis_id,
            score=score,
            points=points,
            difficulty=event.difficulty,
            category=event.category,
            tags=list(event.tags),
            solved_at=solved_at,
            reattempts=event.reattempts or 0,
        )
    )

    day_key = date_key(solved_at)
    day = user.daily_stat_for(day_key)
    if day is None:
        user.daily_stats.append(DailyStat(date=day_key, points=points, problems_solved=1))
    else:
        day.points += points
        day.problems_solved += 1

    extracted = extract_skills(event.category, event.tags)
    tracking = user.skill_tracking
    for s in extracted.skills:
        entry = _upsert(
            tracking.skills,
            lambda it: it.skill == s.skill,
            lambda: SkillEntry(skill=s.skill, category=s.category, last_updated=now),
        )
        _credit(entry, score, points, now)
        entry.last_solved_at = solved_at
    for t in extracted.tech:
        entry = _upsert(
            tracking.tech_stack,
            lambda it: it.technology == t.technology,
            lambda: TechEntry(technology=t.technology, category=t.category, last_updated=now),
        )
        _credit(entry, score, points, now)
        entry.last_used_at = solved_at
    for topic in extracted.topics:
        entry = _upsert(
            tracking.learning_progress,
            lambda it: it.topic == topic.topic,
            lambda: TopicEntry(topic=topic.topic, category=topic.category, last_updated=now),
        )
        _credit(entry, score, points, now)
        entry.last_studied_at = solved_at

    user.activity_log.append(
        ActivityLogEntry(
            type=ActivityType.PROBLEM_SOLVED,
            points=points,
            category=event.category,
            occurred_at=solved_at,
            meta={
                "difficulty": event.difficulty,
                "score": score,
                "problemId": event.problem_id,
                "analysisId": event.analysis_id,
            },
        )
    )
    return points


async def update_user_scoring(store: UserStore, event: SolvedProblemEvent) -> ScoringResult | None:
    """Score a solved problem and persist the user's aggregates with one save.

    A user id that does not resolve is skipped without raising. Storage
    errors propagate to the caller.

    Returns:
        The awarded points, or None when the user does not exist.
    """
    user = await store.get(event.user_id)
    if user is None:
        logger.warning(
            "user_scoring_skipped_missing_user",
            user_id=event.user_id,
            problem_id=event.problem_id,
        )
        return None

    points = apply_solved_problem(user, event)
    await store.save(user)

    logger.info(
        "user_scoring_updated",
        user_id=event.user_id,
        problem_id=event.problem_id,
        difficulty=event.difficulty,
        score=event.score,
        points=points,
        total_points=user.stats.total_points,
    )
    return ScoringResult(points=points)
