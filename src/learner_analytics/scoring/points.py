"""Point calculation and rounding helpers for solved problems."""

import math

BASE_POINTS: dict[str, int] = {
    "easy": 10,
    "medium": 20,
    "hard": 30,
    "expert": 40,
}

DIFFICULTY_MULTIPLIER: dict[str, int] = {
    "easy": 1,
    "medium": 2,
    "hard": 3,
    "expert": 4,
}

MIN_SCORE_MULTIPLIER = 0.1


def calculate_points(difficulty: str, score: float | None) -> int:
    """Convert a reviewed score into points for the given difficulty.

    Args:
        difficulty: Difficulty tier ("easy", "medium", "hard", "expert").
            Unknown tiers use base 0 and multiplier 1.
        score: Review score, nominally 0-100. None counts as 0.

    Returns:
        Points earned, never less than 1.
    """
    base = BASE_POINTS.get(difficulty, 0)
    multiplier = DIFFICULTY_MULTIPLIER.get(difficulty, 1)
    score_multiplier = max(MIN_SCORE_MULTIPLIER, min(1.0, (score or 0) / 100))
    points = math.floor(base * multiplier * score_multiplier)
    return max(1, points)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (82.5 -> 83)."""
    return math.floor(value + 0.5)


def running_average(previous_average: float, previous_count: int, value: float) -> int:
    """Fold one more value into a rounded running average.

    Args:
        previous_average: Stored (already rounded) average.
        previous_count: Number of values the stored average covers.
        value: New value.

    Returns:
        Rounded average over previous_count + 1 values.
    """
    new_count = previous_count + 1
    return round_half_up((previous_average * previous_count + value) / new_count)
