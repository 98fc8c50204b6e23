from datetime import date

import pytest

from models.letter_models import MilestoneSuggestion
from utils.milestone_scheduling import add_months, assign_due_dates, months_after


def _schedule(items, **kwargs):
    return assign_due_dates(
        items,
        get_date=lambda m: m.target_date,
        with_date=lambda m, d: m.model_copy(update={"target_date": d}),
        **kwargs,
    )


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2026, 1, 15), 1, date(2026, 2, 15)),
        (date(2026, 1, 31), 1, date(2026, 2, 28)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2026, 11, 30), 3, date(2027, 2, 28)),
        (date(2026, 12, 1), 12, date(2027, 12, 1)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected


def test_months_after_grows_from_one_to_three():
    assert [months_after(n) for n in range(7)] == [1, 1, 2, 2, 3, 3, 3]


def test_undated_suggestions_spread_from_today():
    items = [MilestoneSuggestion(title=f"m{i}") for i in range(3)]
    scheduled = _schedule(items, today=date(2026, 1, 15))
    assert [m.target_date for m in scheduled] == [
        date(2026, 2, 15),
        date(2026, 3, 15),
        date(2026, 5, 15),
    ]
    # inputs are left untouched
    assert all(m.target_date is None for m in items)


def test_dates_follow_latest_existing_and_dated_items():
    items = [
        MilestoneSuggestion(title="a"),
        MilestoneSuggestion(title="b", target_date=date(2026, 12, 1)),
        MilestoneSuggestion(title="c"),
    ]
    scheduled = _schedule(
        items,
        existing_due_dates=[date(2026, 3, 1), date(2026, 2, 1)],
        today=date(2026, 1, 1),
    )
    assert [m.target_date for m in scheduled] == [
        date(2026, 5, 1),
        date(2026, 12, 1),
        date(2027, 3, 1),
    ]


def test_undated_sequence_is_strictly_increasing():
    items = [MilestoneSuggestion(title=str(i)) for i in range(8)]
    dates = [m.target_date for m in _schedule(items, today=date(2026, 6, 30))]
    assert all(earlier < later for earlier, later in zip(dates, dates[1:]))
