"""Tests for daily-stats rebuild, learning patterns and role match."""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import SOLVED_AT, make_event
from learner_analytics.analytics.recompute import (
    daily_stats_from_history,
    learning_patterns_from_history,
    rebuild_daily_stats,
    recompute_learning_patterns,
    recompute_role_match,
    role_match_from_skills,
    time_band,
)
from learner_analytics.models.user import ActiveGoal, ProblemHistoryEntry, SkillEntry
from learner_analytics.scoring.updater import update_user_scoring
from learner_analytics.storage.user_store import UserNotFoundError


def _history(hour: int, score: float, difficulty: str = "easy", category: str = "algorithms"):
    return ProblemHistoryEntry(
        problem_id="p",
        analysis_id="a",
        score=score,
        points=5,
        difficulty=difficulty,
        category=category,
        solved_at=datetime(2026, 3, 2, hour, 0, tzinfo=timezone.utc),
    )


class TestTimeBand:
    @pytest.mark.parametrize(
        "hour,band",
        [
            (5, "morning"), (11, "morning"),
            (12, "afternoon"), (16, "afternoon"),
            (17, "evening"), (21, "evening"),
            (22, "night"), (0, "night"), (4, "night"),
        ],
    )
    def test_boundaries(self, hour, band):
        assert time_band(hour) == band


class TestDailyStatsRebuild:
    def test_groups_by_day_in_first_seen_order(self):
        history = [_history(9, 80), _history(23, 60), _history(9, 70)]
        history[2].solved_at = history[2].solved_at - timedelta(days=1)
        days = daily_stats_from_history(history)
        assert [(d.date, d.points, d.problems_solved) for d in days] == [
            ("2026-03-02", 10, 2),
            ("2026-03-01", 5, 1),
        ]

    async def test_rebuild_replaces_array(self, store, user):
        await update_user_scoring(store, make_event())
        await update_user_scoring(store, make_event(solved_at=SOLVED_AT + timedelta(hours=2)))
        await update_user_scoring(store, make_event(solved_at=SOLVED_AT + timedelta(days=1)))

        record = await store.get("user-1")
        expected = record.daily_stats
        record.daily_stats = []
        await store.save(record)

        rebuilt = await rebuild_daily_stats(store, "user-1")
        assert rebuilt == expected
        assert (await store.get("user-1")).daily_stats == expected

    async def test_rebuild_idempotent(self, store, user):
        await update_user_scoring(store, make_event())
        first = await rebuild_daily_stats(store, "user-1")
        second = await rebuild_daily_stats(store, "user-1")
        assert first == second

    async def test_missing_user(self, store):
        with pytest.raises(UserNotFoundError):
            await rebuild_daily_stats(store, "ghost")


class TestLearningPatterns:
    def test_buckets(self):
        history = [
            _history(6, 80, "easy", "algorithms"),
            _history(13, 60, "medium", "algorithms"),
            _history(18, 70, "hard", "databases"),
            _history(23, 90, "expert", "databases"),
            _history(3, 50, "legendary", ""),
        ]
        patterns = learning_patterns_from_history(history)

        tod = patterns.time_of_day_performance
        assert (tod.morning, tod.afternoon, tod.evening, tod.night) == (80, 60, 70, 70)
        diff = patterns.difficulty_performance
        assert (diff.easy, diff.medium, diff.hard, diff.expert) == (80, 60, 70, 90)
        assert patterns.category_performance == {"algorithms": 70, "databases": 80, "general": 50}

    def test_empty_history(self):
        patterns = learning_patterns_from_history([])
        assert patterns.time_of_day_performance.morning == 0
        assert patterns.category_performance == {}

    async def test_recompute_persists_and_is_idempotent(self, store, user):
        await update_user_scoring(store, make_event(score=80))
        await update_user_scoring(store, make_event(score=65, solved_at=SOLVED_AT + timedelta(hours=10)))

        first = await recompute_learning_patterns(store, "user-1")
        second = await recompute_learning_patterns(store, "user-1")
        assert first == second
        saved = (await store.get("user-1")).learning_patterns
        assert saved.time_of_day_performance.morning == 80
        assert saved.time_of_day_performance.evening == 65
        assert saved.difficulty_performance.easy == 73  # 72.5 rounds up


class TestRoleMatch:
    def _skills(self, *averages):
        return [
            SkillEntry(skill=f"s{i}", category="programming-language", average_score=a)
            for i, a in enumerate(averages)
        ]

    def test_top_five_average(self):
        match = role_match_from_skills(self._skills(40, 90, 60, 80, 50, 70), "Backend")
        assert match.match_percent == 70
        assert match.target_role == "Backend"
        assert match.gaps == []
        assert match.last_computed_at is not None

    def test_no_skills(self):
        assert role_match_from_skills([], "Backend").match_percent == 0

    async def test_defaults_to_generalist(self, store, user):
        await update_user_scoring(store, make_event(score=84))
        match = await recompute_role_match(store, "user-1")
        assert match.target_role == "Generalist"
        assert match.match_percent == 84

    async def test_uses_active_goal_role(self, store, user):
        record = await store.get("user-1")
        record.active_goal = ActiveGoal(role="Data Engineer")
        await store.save(record)

        match = await recompute_role_match(store, "user-1")
        assert match.target_role == "Data Engineer"
        assert (await store.get("user-1")).role_match.target_role == "Data Engineer"

    async def test_explicit_role_wins(self, store, user):
        record = await store.get("user-1")
        record.active_goal = ActiveGoal(role="Data Engineer")
        await store.save(record)

        match = await recompute_role_match(store, "user-1", target_role="SRE")
        assert match.target_role == "SRE"

    async def test_missing_user(self, store):
        with pytest.raises(UserNotFoundError):
            await recompute_role_match(store, "ghost")
