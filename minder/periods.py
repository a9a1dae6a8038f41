from collections.abc import Sequence
from dataclasses import dataclass, field

from .core.errors import ValidationError
from .core.models import CATEGORY_ORDER, Routine, TimeCategory
from .index import CompletionIndex, active_routines
from .lib.dates import add_days, enumerate_dates, year_start
from .lib.numbers import percent

__all__ = [
    "EPOCH_FLOOR",
    "PERIODS",
    "PeriodTotals",
    "Window",
    "aggregate",
    "category_counts",
    "period_label",
    "resolve_window",
]

EPOCH_FLOOR = "2020-01-01"

PERIODS: dict[str, str] = {
    "7d": "Last 7 Days",
    "30d": "Last 30 Days",
    "1y": "Last Year",
    "ytd": "Year to Date",
    "all": "All Time",
}

_FIXED_SPANS = {"7d": 7, "30d": 30, "1y": 365}


@dataclass(frozen=True)
class Window:
    start: str
    end: str
    label: str

    def days(self) -> list[str]:
        return enumerate_dates(self.start, self.end)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, str) and self.start <= day <= self.end


@dataclass(frozen=True)
class PeriodTotals:
    total_tasks: int = 0
    completed_count: int = 0
    completion_rate: int = 0
    perfect_days: int = 0
    by_category: dict[TimeCategory, int] = field(
        default_factory=lambda: dict.fromkeys(CATEGORY_ORDER, 0)
    )


def period_label(period: str | int) -> str:
    if isinstance(period, int):
        return f"Last {period} Days"
    if period not in PERIODS:
        raise ValidationError(f"unknown period '{period}' (expected {', '.join(PERIODS)})")
    return PERIODS[period]


def resolve_window(period: str | int, today: str) -> Window:
    """Map a period tag (or a day count) to an inclusive [start, today] window."""
    if isinstance(period, str) and period.isdigit():
        period = int(period)
    label = period_label(period)
    if isinstance(period, int):
        if period <= 0:
            raise ValidationError(f"period must cover at least one day, got {period}")
        return Window(add_days(today, -(period - 1)), today, label)
    if period in _FIXED_SPANS:
        return Window(add_days(today, -(_FIXED_SPANS[period] - 1)), today, label)
    if period == "ytd":
        return Window(year_start(today), today, label)
    return Window(EPOCH_FLOOR, today, label)


def category_counts(
    routines: Sequence[Routine],
    index: CompletionIndex,
    start: str | None = None,
    end: str | None = None,
) -> dict[TimeCategory, int]:
    """Completed slots per time category; lifetime when no bounds are given."""
    counts = dict.fromkeys(CATEGORY_ORDER, 0)
    ids = [r.id for r in active_routines(routines)]
    for _routine_id, day, category in index.slots(ids):
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        counts[category] += 1
    return counts


def aggregate(
    routines: Sequence[Routine], index: CompletionIndex, start: str, end: str
) -> PeriodTotals:
    active = active_routines(routines)
    if not active:
        return PeriodTotals()

    slots_per_day = sum(len(r.time_categories) for r in active)
    total_tasks = 0
    completed = 0
    perfect = 0
    for day in enumerate_dates(start, end):
        total_tasks += slots_per_day
        done = sum(
            1 for r in active for cat in r.time_categories if index.is_done(r.id, day, cat)
        )
        completed += done
        if index.all_complete(active, day):
            perfect += 1

    return PeriodTotals(
        total_tasks=total_tasks,
        completed_count=completed,
        completion_rate=percent(completed, total_tasks),
        perfect_days=perfect,
        by_category=category_counts(active, index, start, end),
    )
