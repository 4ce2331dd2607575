from datetime import datetime, timedelta

from leitner.application.due_selector import select_due


def test_future_cards_are_excluded_regardless_of_box(make_card, now):
    cards = [
        make_card(id="future-1", box=1, next_review=now + timedelta(minutes=1)),
        make_card(id="future-5", box=5, next_review=now + timedelta(days=3)),
        make_card(id="due", box=3, next_review=now - timedelta(days=1)),
    ]

    due = select_due(cards, as_of=now)

    assert [c.id for c in due] == ["due"]


def test_due_exactly_now_is_included(make_card, now):
    cards = [make_card(id="edge", next_review=now)]
    assert [c.id for c in select_due(cards, as_of=now)] == ["edge"]


def test_sorted_by_box_ascending_and_stable(make_card, now):
    past = now - timedelta(hours=1)
    cards = [
        make_card(id="b4", box=4, next_review=past),
        make_card(id="b1-first", box=1, next_review=past),
        make_card(id="b2", box=2, next_review=past),
        make_card(id="b1-second", box=1, next_review=past),
    ]

    due = select_due(cards, as_of=now)

    assert [c.id for c in due] == ["b1-first", "b1-second", "b2", "b4"]


def test_empty_input():
    assert select_due([]) == []


def test_naive_as_of_is_treated_as_utc(make_card, now):
    cards = [make_card(id="due", next_review=now - timedelta(seconds=1))]
    naive = datetime(now.year, now.month, now.day, now.hour)
    assert len(select_due(cards, as_of=naive)) == 1


def test_select_due_does_not_mutate(make_card, now):
    cards = [make_card(box=3, next_review=now - timedelta(days=1))]
    before = [(c.box, c.next_review) for c in cards]
    select_due(cards, as_of=now)
    assert [(c.box, c.next_review) for c in cards] == before
