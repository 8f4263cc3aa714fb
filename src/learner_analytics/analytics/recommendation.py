"""Next-up recommendation for the learner dashboard."""

from datetime import date

from learner_analytics.models.user import UserRecord, utcnow
from learner_analytics.models.views import Recommendation, RecommendationAction
from learner_analytics.storage.user_store import UserStore, require_user


def recommend_next(user: UserRecord, today: date) -> Recommendation:
    """Pick one of three fixed suggestions.

    Nothing solved today -> start a streak with an easy algorithms problem.
    An active goal with focus skills -> a medium problem in the first focus
    skill. Otherwise -> explore system design.
    """
    if user.daily_stat_for(today.isoformat()) is None:
        return Recommendation(
            type="streak",
            title="Start your streak today",
            description="Solve one quick problem to kick off your momentum.",
            tags=["Algorithms", "beginner", "~10 mins"],
            action=RecommendationAction(difficulty="easy", category="algorithms"),
        )

    if user.active_goal and user.active_goal.focus_skills:
        focus = user.active_goal.focus_skills[0]
        return Recommendation(
            type="goal_gap",
            title=f"Boost {focus} towards your goal",
            description=f"Target a challenge in {focus} to make progress.",
            tags=[focus, "medium", "~20 mins"],
            action=RecommendationAction(difficulty="medium", category=focus),
        )

    return Recommendation(
        type="explore",
        title="Explore a new category",
        description="Broaden your strengths with a fresh topic.",
        tags=["System Design", "beginner", "~15 mins"],
        action=RecommendationAction(difficulty="easy", category="system-design"),
    )


async def get_next_up_recommendation(
    store: UserStore, user_id: str, today: date | None = None
) -> Recommendation:
    user = await require_user(store, user_id)
    return recommend_next(user, today or utcnow().date())
