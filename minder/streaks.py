"""Streak counting over a day predicate.

A day predicate answers "was this day complete?" for a `YYYY-MM-DD` string.
The same calculator serves the dashboard streak (every active routine done)
and per-routine streaks (every category of one routine done).
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .core.models import Routine
from .index import CompletionIndex, active_routines
from .lib.dates import add_days, enumerate_dates

__all__ = [
    "DEFAULT_LOOKBACK_DAYS",
    "DayPredicate",
    "Streaks",
    "all_routines_complete",
    "compute_streaks",
    "routine_complete",
    "streak_as_of",
    "streak_series",
]

DEFAULT_LOOKBACK_DAYS = 365

DayPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class Streaks:
    current: int = 0
    longest: int = 0


def all_routines_complete(routines: Sequence[Routine], index: CompletionIndex) -> DayPredicate:
    active = active_routines(routines)

    def _complete(day: str) -> bool:
        return index.all_complete(active, day)

    return _complete


def routine_complete(routine: Routine, index: CompletionIndex) -> DayPredicate:
    def _complete(day: str) -> bool:
        return index.routine_complete(routine, day)

    return _complete


def _trailing_run(flags: list[bool]) -> int:
    end = len(flags)
    # today still in progress: an unfinished today neither counts nor breaks
    if end and not flags[-1]:
        end -= 1
    run = 0
    for flag in reversed(flags[:end]):
        if not flag:
            break
        run += 1
    return run


def compute_streaks(
    is_day_complete: DayPredicate, today: str, lookback_days: int = DEFAULT_LOOKBACK_DAYS
) -> Streaks:
    if lookback_days <= 0:
        return Streaks()
    days = enumerate_dates(add_days(today, -(lookback_days - 1)), today)
    flags = [is_day_complete(day) for day in days]

    longest = run = 0
    for flag in flags:
        run = run + 1 if flag else 0
        longest = max(longest, run)

    return Streaks(current=_trailing_run(flags), longest=longest)


def streak_as_of(
    is_day_complete: DayPredicate, day: str, lookback_days: int = DEFAULT_LOOKBACK_DAYS
) -> int:
    """The current streak as it would have read on `day`."""
    return compute_streaks(is_day_complete, day, lookback_days).current


def streak_series(is_day_complete: DayPredicate, start: str, end: str) -> dict[str, int]:
    """streak_as_of for every day from start to end, in one pass."""
    series: dict[str, int] = {}
    run = 0
    for day in enumerate_dates(start, end):
        previous = run
        run = run + 1 if is_day_complete(day) else 0
        series[day] = run if run else previous
    return series
