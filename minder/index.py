import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from .core.models import Completion, Routine, TimeCategory

__all__ = ["CompletionIndex", "Slot", "active_routines"]

logger = logging.getLogger(__name__)

Slot = tuple[str, str, TimeCategory]


def active_routines(routines: Iterable[Routine]) -> list[Routine]:
    return [r for r in routines if r.is_active]


def _record_order(item: tuple[int, Completion]) -> tuple[float, int]:
    # epoch seconds so naive (local) and aware timestamps compare; unset sorts first
    position, completion = item
    at = completion.completed_at
    return (at.timestamp() if at is not None else float("-inf"), position)


class CompletionIndex:
    """Collapsed view of completion records: one state per (routine, day, category).

    Records for unknown routines or for categories the routine no longer has
    are dropped. When a slot has several records, the one with the latest
    completed_at wins; equal timestamps fall back to input order.
    """

    def __init__(self, routines: Sequence[Routine], completions: Iterable[Completion]):
        self._routines = {r.id: r for r in routines}
        latest: dict[Slot, Completion] = {}
        for _pos, c in sorted(enumerate(completions), key=_record_order):
            routine = self._routines.get(c.routine_id)
            if routine is None:
                logger.debug("ignoring completion %s: unknown routine %s", c.id, c.routine_id)
                continue
            if c.time_category not in routine.time_categories:
                logger.debug(
                    "ignoring completion %s: %s not scheduled for %s",
                    c.id,
                    c.time_category,
                    routine.name,
                )
                continue
            latest[(c.routine_id, c.date, c.time_category)] = c

        self._done: set[Slot] = {slot for slot, c in latest.items() if c.completed}
        self._by_day: dict[str, list[Slot]] = defaultdict(list)
        for slot in sorted(self._done):
            self._by_day[slot[1]].append(slot)

    def __len__(self) -> int:
        return len(self._done)

    def is_done(self, routine_id: str, day: str, category: TimeCategory) -> bool:
        return (routine_id, day, category) in self._done

    def slots(
        self, routine_ids: Iterable[str] | None = None, until: str | None = None
    ) -> list[Slot]:
        """Completed slots in day order, optionally restricted to some routines and to days up to `until`."""
        wanted = set(routine_ids) if routine_ids is not None else None
        return [
            slot
            for day in self.days(until)
            for slot in self._by_day[day]
            if wanted is None or slot[0] in wanted
        ]

    def days(self, until: str | None = None) -> list[str]:
        return [day for day in sorted(self._by_day) if until is None or day <= until]

    def routine_complete(self, routine: Routine, day: str) -> bool:
        return all(self.is_done(routine.id, day, cat) for cat in routine.time_categories)

    def all_complete(self, routines: Sequence[Routine], day: str) -> bool:
        if not routines:
            return False
        return all(self.routine_complete(r, day) for r in routines)
