"""
Domain models for study statistics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BoxCount:
    """Number of cards currently sitting in one Leitner box."""

    box: int
    count: int


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Derived view over a card collection at a point in time.

    Not persisted; recomputed on every request.

    Attributes:
        total_cards: Number of cards owned.
        due_today: Cards whose next review has passed.
        reviewed_today: Cards updated since the start of the current day.
        today_progress: Percentage (0-100) of today's due load already reviewed.
        current_streak: Consecutive days, ending today, with any activity.
        box_stats: One entry per box 1..5, counts sum to total_cards.
        activity_by_date: "YYYY-MM-DD" -> cards updated that day, newest first.
    """

    total_cards: int
    due_today: int
    reviewed_today: int
    today_progress: int
    current_streak: int
    box_stats: tuple[BoxCount, ...]
    activity_by_date: dict[str, int] = field(default_factory=dict)
