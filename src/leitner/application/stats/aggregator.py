"""
Statistics aggregator for a learner's card collection.

This is a pure computation module with no I/O. All day boundaries are
UTC calendar days.
"""

import math
from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone

from leitner.application.due_selector import is_due
from leitner.application.scheduler import clamp_box
from leitner.domain.constants import (
    DEFAULT_ACTIVITY_WINDOW_DAYS,
    FULL_PROGRESS,
    MAX_BOX,
    MIN_BOX,
)
from leitner.domain.models import Card, ensure_utc, utc_now
from leitner.domain.stats.models import BoxCount, StatsSnapshot


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=timezone.utc)


class StatsAggregator:
    """
    Computes a StatsSnapshot from a card collection.

    Stateless and side-effect free: identical cards and `as_of` always
    produce an identical snapshot.
    """

    def __init__(self, activity_window_days: int = DEFAULT_ACTIVITY_WINDOW_DAYS):
        if activity_window_days < 0:
            raise ValueError("activity_window_days must be >= 0")
        self.activity_window_days = activity_window_days

    def summarize(self, cards: Iterable[Card], as_of: datetime | None = None) -> StatsSnapshot:
        cards = list(cards)
        as_of = ensure_utc(as_of) if as_of else utc_now()
        today = start_of_day(as_of)

        due_today = sum(1 for card in cards if is_due(card, as_of))
        reviewed_today = self._count_reviewed_on(cards, today)
        activity = self._compute_activity(cards, today)

        return StatsSnapshot(
            total_cards=len(cards),
            due_today=due_today,
            reviewed_today=reviewed_today,
            today_progress=self._compute_progress(due_today, reviewed_today),
            current_streak=self._compute_streak(activity, today.date()),
            box_stats=self._compute_box_stats(cards),
            activity_by_date=activity,
        )

    def _count_reviewed_on(self, cards: list[Card], day_start: datetime) -> int:
        day_end = day_start + timedelta(days=1)
        return sum(1 for card in cards if day_start <= ensure_utc(card.updated_at) < day_end)

    def _compute_box_stats(self, cards: list[Card]) -> tuple[BoxCount, ...]:
        counts = Counter(clamp_box(card.box) for card in cards)
        return tuple(BoxCount(box=b, count=counts[b]) for b in range(MIN_BOX, MAX_BOX + 1))

    def _compute_progress(self, due_today: int, reviewed_today: int) -> int:
        """
        Percentage of today's due load already reviewed.

        Nothing due means the learner is vacuously caught up. Halves round up.
        """
        if due_today == 0 or reviewed_today >= due_today:
            return FULL_PROGRESS
        return math.floor(FULL_PROGRESS * reviewed_today / due_today + 0.5)

    def _compute_activity(self, cards: list[Card], today: datetime) -> dict[str, int]:
        """
        Count updated cards per day over the trailing window, newest day first.
        """
        window_start = today - timedelta(days=self.activity_window_days)
        window_end = today + timedelta(days=1)

        counts: Counter[str] = Counter()
        for card in cards:
            updated = ensure_utc(card.updated_at)
            if window_start <= updated < window_end:
                counts[updated.date().isoformat()] += 1

        return {day: counts[day] for day in sorted(counts, reverse=True)}

    def _compute_streak(self, activity: dict[str, int], today: date) -> int:
        """
        Walk backward from today until the first day without activity.

        Today must have activity for the streak to be non-zero.
        """
        streak = 0
        day = today
        while activity.get(day.isoformat(), 0) > 0:
            streak += 1
            day -= timedelta(days=1)
        return streak


def summarize(
    cards: Iterable[Card],
    activity_window_days: int = DEFAULT_ACTIVITY_WINDOW_DAYS,
    as_of: datetime | None = None,
) -> StatsSnapshot:
    """Convenience wrapper around StatsAggregator.summarize."""
    return StatsAggregator(activity_window_days).summarize(cards, as_of)
