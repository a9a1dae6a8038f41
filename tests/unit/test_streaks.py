import pytest

from minder.index import CompletionIndex
from minder.streaks import (
    Streaks,
    all_routines_complete,
    compute_streaks,
    routine_complete,
    streak_as_of,
    streak_series,
)
from tests.conftest import TODAY, days_back, done, routine


def _days(*offsets: int) -> set[str]:
    return {days_back(n) for n in offsets}


def _streaks(offsets, lookback=365) -> Streaks:
    complete = _days(*offsets)
    return compute_streaks(lambda day: day in complete, TODAY, lookback)


def test_no_complete_days():
    assert _streaks([]) == Streaks(0, 0)


def test_only_today_complete():
    assert _streaks([0]) == Streaks(current=1, longest=1)


def test_unfinished_today_does_not_break_streak():
    assert _streaks([1, 2, 3]) == Streaks(current=3, longest=3)


def test_today_complete_extends_streak():
    assert _streaks([0, 1, 2]) == Streaks(current=3, longest=3)


def test_gap_at_yesterday_breaks_streak():
    assert _streaks([2, 3, 4]) == Streaks(current=0, longest=3)


def test_gap_at_yesterday_with_today_complete():
    assert _streaks([0, 2, 3]) == Streaks(current=1, longest=2)


def test_longest_found_in_history():
    assert _streaks([1, 2, 20, 21, 22, 23, 24]) == Streaks(current=2, longest=5)


def test_runs_outside_lookback_ignored():
    assert _streaks([400, 401, 402]) == Streaks(0, 0)


def test_lookback_is_configurable():
    assert _streaks([0, 1, 2, 3, 4], lookback=3) == Streaks(current=3, longest=3)


def test_zero_lookback():
    assert _streaks([0, 1], lookback=0) == Streaks(0, 0)


@pytest.mark.parametrize(
    "offsets",
    [[], [0], [1], [0, 1, 2], [5, 6, 7, 8], [0, 2, 4, 6], [1, 2, 10, 11, 12, 13], list(range(50))],
)
def test_current_never_exceeds_longest(offsets):
    s = _streaks(offsets)
    assert s.current <= s.longest


def test_longest_never_drops_when_history_added():
    history: list[int] = []
    previous = 0
    for offset in [3, 4, 10, 11, 12, 1, 2, 30, 5]:
        history.append(offset)
        longest = _streaks(history).longest
        assert longest >= previous
        previous = longest


def test_aggregate_predicate_requires_every_active_routine():
    vitamins = routine("vitamins", ["AM", "PM"])
    journal = routine("journal", ["AM"])
    records = done(vitamins, days_back(1)) + done(journal, days_back(1))
    records += done(vitamins, days_back(2))
    index = CompletionIndex([vitamins, journal], records)

    s = compute_streaks(all_routines_complete([vitamins, journal], index), TODAY)
    assert s == Streaks(current=1, longest=1)


def test_aggregate_predicate_ignores_paused_routines():
    vitamins = routine("vitamins", ["AM"])
    paused = routine("guitar", ["PM"], is_active=False)
    index = CompletionIndex([vitamins, paused], done(vitamins, days_back(1)))
    s = compute_streaks(all_routines_complete([vitamins, paused], index), TODAY)
    assert s.current == 1


def test_aggregate_streak_zero_without_routines():
    r = routine("vitamins")
    index = CompletionIndex([r], done(r, TODAY))
    assert compute_streaks(all_routines_complete([], index), TODAY) == Streaks(0, 0)


def test_per_routine_predicate():
    vitamins = routine("vitamins", ["AM", "PM"])
    journal = routine("journal", ["AM"])
    records = done(journal, days_back(1)) + done(journal, days_back(2))
    records += done(vitamins, days_back(1), "AM")
    index = CompletionIndex([vitamins, journal], records)

    assert compute_streaks(routine_complete(journal, index), TODAY) == Streaks(2, 2)
    assert compute_streaks(routine_complete(vitamins, index), TODAY) == Streaks(0, 0)


def test_streak_as_of_past_day():
    complete = _days(5, 6, 7)
    assert streak_as_of(lambda d: d in complete, days_back(5)) == 3
    assert streak_as_of(lambda d: d in complete, days_back(4)) == 3
    assert streak_as_of(lambda d: d in complete, days_back(3)) == 0


def test_streak_series_matches_streak_as_of():
    complete = _days(1, 2, 4, 5, 6, 9)
    pred = lambda d: d in complete  # noqa: E731
    series = streak_series(pred, days_back(10), TODAY)
    for day, value in series.items():
        assert value == streak_as_of(pred, day), day
