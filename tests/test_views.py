"""Tests for read-only views, streaks, recommendations and user actions."""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import SOLVED_AT, make_event
from learner_analytics.analytics.recommendation import (
    get_next_up_recommendation,
    recommend_next,
)
from learner_analytics.analytics.streak import current_streak
from learner_analytics.analytics.user_actions import log_activity, set_active_goal
from learner_analytics.analytics.views import (
    get_dashboard_summary,
    get_skill_summary,
    get_user_insights,
)
from learner_analytics.models.user import (
    ActiveGoal,
    ActivityType,
    Comparisons,
    DailyStat,
    GoalOutcome,
    SkillEntry,
    UserRecord,
)
from learner_analytics.scoring.updater import update_user_scoring
from learner_analytics.storage.user_store import UserNotFoundError

TODAY = date(2026, 3, 2)


class TestSkillSummary:
    async def test_summary(self, store, user):
        await update_user_scoring(store, make_event(tags=["python", "react"]))
        summary = await get_skill_summary(store, "user-1")
        assert summary.total_points == 8
        assert summary.average_score == 80
        assert summary.highest_score == 80
        assert [s.skill for s in summary.skills] == ["Python"]
        assert [t.technology for t in summary.tech_stack] == ["React"]
        assert [t.topic for t in summary.learning_progress] == ["Algorithms"]
        assert summary.problems_by_category["algorithms"].solved == 1

    async def test_missing_user(self, store):
        with pytest.raises(UserNotFoundError):
            await get_skill_summary(store, "ghost")


class TestDashboardSummary:
    async def test_recent_skills_and_window(self, store):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        record = UserRecord(user_id="user-1")
        record.skill_tracking.skills = [
            SkillEntry(skill=f"s{i}", category="c", last_updated=base + timedelta(days=i))
            for i in range(7)
        ]
        record.daily_stats = [
            DailyStat(date=(TODAY - timedelta(days=i)).isoformat(), points=1, problems_solved=1)
            for i in reversed(range(40))
        ]
        await store.save(record)

        summary = await get_dashboard_summary(store, "user-1", today=TODAY)
        assert [s.skill for s in summary.skills] == ["s6", "s5", "s4", "s3", "s2"]
        assert len(summary.daily_stats) == 30
        assert summary.daily_stats[-1].date == TODAY.isoformat()
        assert summary.current_streak == 40
        assert summary.active_goal is None

    async def test_configurable_limits(self, store, user):
        await update_user_scoring(store, make_event())
        summary = await get_dashboard_summary(
            store, "user-1", skill_limit=0, daily_stats_window=0, today=TODAY
        )
        assert summary.skills == []
        assert summary.daily_stats == []
        assert summary.current_streak == 1

    async def test_missing_user(self, store):
        with pytest.raises(UserNotFoundError):
            await get_dashboard_summary(store, "ghost")


class TestInsights:
    async def test_insights(self, store, user):
        await update_user_scoring(store, make_event())
        record = await store.get("user-1")
        record.comparisons = Comparisons(community_percentile=92.5, cohort="2026-spring")
        await store.save(record)

        insights = await get_user_insights(store, "user-1")
        assert insights.totals.points == 8
        assert insights.totals.problems_solved == 1
        assert insights.problems_by_difficulty["easy"].solved == 1
        assert len(insights.daily_stats) == 1
        assert insights.comparisons.cohort == "2026-spring"
        assert insights.comparisons.community_percentile == 92.5


class TestStreak:
    def _days(self, *offsets, solved=1):
        return [
            DailyStat(date=(TODAY - timedelta(days=o)).isoformat(), problems_solved=solved)
            for o in offsets
        ]

    def test_consecutive_days(self):
        assert current_streak(self._days(0, 1, 2, 4), TODAY) == 3

    def test_nothing_today(self):
        assert current_streak(self._days(1, 2), TODAY) == 0

    def test_empty_days_do_not_count(self):
        stats = self._days(0) + self._days(1, solved=0)
        assert current_streak(stats, TODAY) == 1


class TestRecommendation:
    def test_streak_when_nothing_today(self):
        rec = recommend_next(UserRecord(user_id="u"), TODAY)
        assert rec.type == "streak"
        assert rec.action.difficulty == "easy"
        assert rec.action.category == "algorithms"

    def test_goal_gap_with_focus_skills(self):
        user = UserRecord(
            user_id="u",
            daily_stats=[DailyStat(date=TODAY.isoformat(), points=8, problems_solved=1)],
            active_goal=ActiveGoal(role="Backend", focus_skills=["Databases", "Go"]),
        )
        rec = recommend_next(user, TODAY)
        assert rec.type == "goal_gap"
        assert rec.title == "Boost Databases towards your goal"
        assert rec.tags == ["Databases", "medium", "~20 mins"]
        assert rec.action.difficulty == "medium"
        assert rec.action.category == "Databases"

    def test_explore_otherwise(self):
        user = UserRecord(
            user_id="u",
            daily_stats=[DailyStat(date=TODAY.isoformat(), points=8, problems_solved=1)],
            active_goal=ActiveGoal(role="Backend"),
        )
        rec = recommend_next(user, TODAY)
        assert rec.type == "explore"
        assert rec.action.category == "system-design"

    async def test_from_store(self, store, user):
        await update_user_scoring(store, make_event())
        rec = await get_next_up_recommendation(store, "user-1", today=SOLVED_AT.date())
        assert rec.type == "explore"

    async def test_missing_user(self, store):
        with pytest.raises(UserNotFoundError):
            await get_next_up_recommendation(store, "ghost")


class TestUserActions:
    async def test_set_goal_defaults_started_at(self, store, user):
        goal = await set_active_goal(store, "user-1", ActiveGoal(role="Backend", focus_skills=["Python"]))
        assert goal.started_at is not None
        saved = await store.get("user-1")
        assert saved.active_goal.role == "Backend"
        assert saved.goals_history == []

    async def test_switching_goal_records_history(self, store, user):
        await set_active_goal(store, "user-1", ActiveGoal(role="Backend"))
        await set_active_goal(store, "user-1", ActiveGoal(role="Data Engineer"))

        saved = await store.get("user-1")
        assert saved.active_goal.role == "Data Engineer"
        assert len(saved.goals_history) == 1
        assert saved.goals_history[0].role == "Backend"
        assert saved.goals_history[0].outcome == GoalOutcome.SWITCHED

    async def test_log_activity(self, store, user):
        entry = await log_activity(
            store, "user-1", ActivityType.RESOURCE_VIEWED, category="forge", meta={"resourceId": "r1"}
        )
        assert entry.type == ActivityType.RESOURCE_VIEWED

        saved = await store.get("user-1")
        assert len(saved.activity_log) == 1
        assert saved.activity_log[0].meta == {"resourceId": "r1"}
        assert saved.stats.total_points == 0

    async def test_missing_user(self, store):
        with pytest.raises(UserNotFoundError):
            await log_activity(store, "ghost", ActivityType.STREAK_VISIT)

    async def test_log_activity_rejects_problem_solved(self, store, user):
        with pytest.raises(ValueError):
            await log_activity(store, "user-1", ActivityType.PROBLEM_SOLVED, points=500)
        assert (await store.get("user-1")).activity_log == []
