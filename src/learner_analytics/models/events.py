"""Inbound events and request payloads."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from learner_analytics.models.user import ActivityType, DocumentModel, ObjectIdStr


class ProblemSolvedPayload(DocumentModel):
    """A reviewed solution, as reported by the solution-review workflow.

    ``difficulty`` is a plain string; unknown tiers score the minimum.
    """

    problem_id: ObjectIdStr
    analysis_id: ObjectIdStr
    score: float | None = None
    difficulty: str
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    solved_at: datetime | None = None
    reattempts: int | None = None


class SolvedProblemEvent(ProblemSolvedPayload):
    user_id: ObjectIdStr


class ScoringResult(DocumentModel):
    points: int


class ActivityPayload(DocumentModel):
    """A non-scoring activity. Solved problems go through the scoring pipeline."""

    type: ActivityType
    points: int | None = None
    category: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type")
    @classmethod
    def _not_scoring_event(cls, value: ActivityType) -> ActivityType:
        if value == ActivityType.PROBLEM_SOLVED:
            raise ValueError("problem_solved activity is recorded by the scoring pipeline")
        return value
