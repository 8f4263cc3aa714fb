"""Shared fixtures: a JSON-backed store in a temp dir and event factories."""

from datetime import datetime, timezone

import pytest

from learner_analytics.models.events import SolvedProblemEvent
from learner_analytics.models.user import UserRecord
from learner_analytics.storage.user_store import JsonUserStore

SOLVED_AT = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return JsonUserStore(tmp_path / "users")


@pytest.fixture
async def user(store):
    record = UserRecord(user_id="user-1")
    await store.save(record)
    return record


def make_event(**overrides) -> SolvedProblemEvent:
    data = {
        "user_id": "user-1",
        "problem_id": "problem-1",
        "analysis_id": "analysis-1",
        "score": 80,
        "difficulty": "easy",
        "category": "algorithms",
        "tags": ["python"],
        "solved_at": SOLVED_AT,
    }
    data.update(overrides)
    return SolvedProblemEvent(**data)
