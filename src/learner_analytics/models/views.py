"""Read-only projections of a user record."""

from pydantic import Field

from learner_analytics.models.user import (
    ActiveGoal,
    Comparisons,
    DailyStat,
    DifficultyBucket,
    DocumentModel,
    LearningPatterns,
    RoleMatch,
    SkillEntry,
    TechEntry,
    TopicEntry,
)


class SkillSummary(DocumentModel):
    total_points: int = 0
    average_score: int = 0
    highest_score: float = 0
    skills: list[SkillEntry] = Field(default_factory=list)
    tech_stack: list[TechEntry] = Field(default_factory=list)
    learning_progress: list[TopicEntry] = Field(default_factory=list)
    problems_by_difficulty: dict[str, DifficultyBucket] = Field(default_factory=dict)
    problems_by_category: dict[str, DifficultyBucket] = Field(default_factory=dict)


class DashboardSummary(DocumentModel):
    total_points: int = 0
    average_score: int = 0
    highest_score: float = 0
    current_streak: int = 0
    skills: list[SkillEntry] = Field(default_factory=list)
    daily_stats: list[DailyStat] = Field(default_factory=list)
    role_match: RoleMatch = Field(default_factory=RoleMatch)
    active_goal: ActiveGoal | None = None


class InsightTotals(DocumentModel):
    points: int = 0
    average_score: int = 0
    highest_score: float = 0
    problems_solved: int = 0


class UserInsights(DocumentModel):
    totals: InsightTotals = Field(default_factory=InsightTotals)
    problems_by_difficulty: dict[str, DifficultyBucket] = Field(default_factory=dict)
    problems_by_category: dict[str, DifficultyBucket] = Field(default_factory=dict)
    daily_stats: list[DailyStat] = Field(default_factory=list)
    learning_patterns: LearningPatterns = Field(default_factory=LearningPatterns)
    role_match: RoleMatch = Field(default_factory=RoleMatch)
    comparisons: Comparisons = Field(default_factory=Comparisons)
    active_goal: ActiveGoal | None = None


class RecommendationAction(DocumentModel):
    kind: str = "solve_problem"
    difficulty: str
    category: str


class Recommendation(DocumentModel):
    """What the learner should do next."""

    type: str  # "streak", "goal_gap" or "explore"
    title: str
    description: str
    tags: list[str] = Field(default_factory=list)
    action: RecommendationAction
