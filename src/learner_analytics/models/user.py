"""User record model: scoring aggregates and analytics embedded in one document."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated, Any

from bson import ObjectId
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


def _str_to_object_id(value: str, info: SerializationInfo) -> Any:
    # Dumps for Mongo pass context={"object_ids": True} to restore native ids
    if info.context and info.context.get("object_ids") and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


# Mongo references arrive as ObjectId; everything downstream works with strings
ObjectIdStr = Annotated[
    str,
    BeforeValidator(_object_id_to_str),
    PlainSerializer(_str_to_object_id, return_type=Any),
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def date_key(value: datetime) -> str:
    """Calendar day (UTC) used to key daily stats, e.g. ``2026-10-19``."""
    return as_utc(value).date().isoformat()


class DocumentModel(BaseModel):
    """Embedded document: snake_case attributes, camelCase when persisted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Difficulty(StrEnum):
    """Problem difficulty tiers."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class SkillLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ActivityType(StrEnum):
    """Events recorded in a user's activity log."""

    PROBLEM_SOLVED = "problem_solved"
    RESOURCE_VIEWED = "resource_viewed"
    BOOKMARK_ADDED = "bookmark_added"
    STREAK_VISIT = "streak_visit"
    HACKATHON_SUBMISSION = "hackathon_submission"


class GoalOutcome(StrEnum):
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    SWITCHED = "switched"


class DifficultyBucket(DocumentModel):
    """Solved count, rounded average score and points for one bucket."""

    solved: int = 0
    average_score: int = 0
    total_points: int = 0


def _empty_difficulty_buckets() -> dict[str, DifficultyBucket]:
    return {d.value: DifficultyBucket() for d in Difficulty}


class UserStats(DocumentModel):
    problems_solved: int = 0
    resources_created: int = 0
    reputation: int = 0
    total_points: int = 0
    average_score: int = 0
    highest_score: float = 0
    problems_by_difficulty: dict[str, DifficultyBucket] = Field(
        default_factory=_empty_difficulty_buckets
    )
    problems_by_category: dict[str, DifficultyBucket] = Field(default_factory=dict)


class ProblemHistoryEntry(DocumentModel):
    """One solved problem. Never mutated once appended."""

    problem_id: ObjectIdStr
    analysis_id: ObjectIdStr
    score: float
    points: int
    difficulty: str
    category: str
    tags: list[str] = Field(default_factory=list)
    solved_at: datetime
    reattempts: int = 0


class DailyStat(DocumentModel):
    date: str  # YYYY-MM-DD, UTC
    points: int = 0
    problems_solved: int = 0


class SkillEntry(DocumentModel):
    skill: str
    category: str
    level: SkillLevel = SkillLevel.BEGINNER
    progress: float = 0
    problems_solved: int = 0
    total_points: int = 0
    average_score: int = 0
    last_solved_at: datetime | None = None
    last_updated: datetime = Field(default_factory=utcnow)


class TechEntry(DocumentModel):
    technology: str
    category: str
    proficiency: float = 0
    problems_solved: int = 0
    total_points: int = 0
    average_score: int = 0
    last_used_at: datetime | None = None
    last_updated: datetime = Field(default_factory=utcnow)


class TopicEntry(DocumentModel):
    topic: str
    category: str
    mastery: float = 0
    problems_solved: int = 0
    total_points: int = 0
    average_score: int = 0
    last_studied_at: datetime | None = None
    last_updated: datetime = Field(default_factory=utcnow)


class SkillTracking(DocumentModel):
    skills: list[SkillEntry] = Field(default_factory=list)
    tech_stack: list[TechEntry] = Field(default_factory=list)
    learning_progress: list[TopicEntry] = Field(default_factory=list)


class ActivityLogEntry(DocumentModel):
    type: ActivityType
    points: int | None = None
    category: str | None = None
    occurred_at: datetime = Field(default_factory=utcnow)
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("meta")
    @classmethod
    def _meta_ids_as_strings(cls, meta: dict[str, Any]) -> dict[str, Any]:
        return {key: _object_id_to_str(value) for key, value in meta.items()}


class TimeOfDayPerformance(DocumentModel):
    morning: int = 0
    afternoon: int = 0
    evening: int = 0
    night: int = 0


class DifficultyPerformance(DocumentModel):
    easy: int = 0
    medium: int = 0
    hard: int = 0
    expert: int = 0


class LearningPatterns(DocumentModel):
    """Average score by time of day, difficulty and category."""

    time_of_day_performance: TimeOfDayPerformance = Field(default_factory=TimeOfDayPerformance)
    difficulty_performance: DifficultyPerformance = Field(default_factory=DifficultyPerformance)
    category_performance: dict[str, int] = Field(default_factory=dict)


class RoleGap(DocumentModel):
    skill: str
    required_level: float
    current_level: float


class RoleMatch(DocumentModel):
    target_role: str | None = None
    match_percent: int = 0
    gaps: list[RoleGap] = Field(default_factory=list)
    last_computed_at: datetime | None = None


class ActiveGoal(DocumentModel):
    role: str | None = None
    title: str | None = None
    focus_skills: list[str] = Field(default_factory=list)
    started_at: datetime | None = None
    target_date: datetime | None = None


class GoalHistoryEntry(DocumentModel):
    role: str
    title: str | None = None
    achieved_at: datetime | None = None
    outcome: GoalOutcome | None = None


class Comparisons(DocumentModel):
    community_percentile: float = 0
    cohort: str | None = None
    last_computed_at: datetime | None = None


class UserRecord(DocumentModel):
    """Analytics slice of a user document.

    Identity and profile fields belong to other services and are not modelled
    here; stores only ever write back the fields below.
    """

    user_id: ObjectIdStr = Field(alias="_id")
    stats: UserStats = Field(default_factory=UserStats)
    skill_tracking: SkillTracking = Field(default_factory=SkillTracking)
    problem_history: list[ProblemHistoryEntry] = Field(default_factory=list)
    daily_stats: list[DailyStat] = Field(default_factory=list)
    activity_log: list[ActivityLogEntry] = Field(default_factory=list)
    learning_patterns: LearningPatterns = Field(default_factory=LearningPatterns)
    role_match: RoleMatch = Field(default_factory=RoleMatch)
    comparisons: Comparisons = Field(default_factory=Comparisons)
    active_goal: ActiveGoal | None = None
    goals_history: list[GoalHistoryEntry] = Field(default_factory=list)

    def daily_stat_for(self, key: str) -> DailyStat | None:
        """Return the daily stat entry for a ``YYYY-MM-DD`` key, if any."""
        for entry in self.daily_stats:
            if entry.date == key:
                return entry
        return None
