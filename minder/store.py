"""Storage behind the stats engine.

The engine never touches storage; callers take one `Snapshot` from a `Store`,
compute, then hand back what must persist (best streak, newly unlocked
achievements). `SqliteStore` is the real backend, `MemoryStore` keeps the same
contract in a dict for tests and throwaway sessions.
"""

import dataclasses
import logging
import sqlite3
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from . import db
from .core.errors import NotFoundError, ValidationError
from .core.models import Completion, Routine, Settings, TimeCategory, parse_category
from .lib import clock
from .lib.converters import (
    categories_to_text,
    row_to_completion,
    row_to_routine,
    row_to_settings,
)
from .lib.dates import format_local_date, parse_local_date

__all__ = ["MemoryStore", "Snapshot", "SqliteStore", "Store"]

logger = logging.getLogger(__name__)

_ROUTINE_COLS = (
    "id, name, time_categories, is_active, sort_order, notification_enabled, notification_time, icon"
)
_COMPLETION_COLS = "id, routine_id, date, time_category, completed, completed_at"
_SETTINGS_FIELDS = {f.name for f in dataclasses.fields(Settings)}


@dataclass(frozen=True)
class Snapshot:
    routines: list[Routine]
    completions: list[Completion]
    best_streak: int = 0
    unlocked: list[str] = dataclasses.field(default_factory=list)


class Store(Protocol):
    def routines(self) -> list[Routine]: ...

    def get_routine(self, routine_id: str) -> Routine | None: ...

    def add_routine(
        self, name: str, categories: Iterable[str], icon: str | None = None
    ) -> Routine: ...

    def update_routine(self, routine_id: str, **changes: object) -> Routine: ...

    def delete_routine(self, routine_id: str) -> None: ...

    def completions(self, day: str | None = None) -> list[Completion]: ...

    def set_completion(
        self, routine_id: str, day: str, category: str, completed: bool
    ) -> Completion: ...

    def snapshot(self) -> Snapshot: ...

    def record_progress(self, best_streak: int, unlocked: Iterable[str]) -> None: ...

    def settings(self) -> Settings: ...

    def update_settings(self, **changes: object) -> Settings: ...


def _check_slot(routine: Routine | None, routine_id: str, day: str, category: str) -> TimeCategory:
    if routine is None:
        raise NotFoundError(f"no routine with id '{routine_id}'")
    cat = parse_category(category)
    if cat not in routine.time_categories:
        raise ValidationError(f"'{routine.name}' is not scheduled for {cat}")
    parse_local_date(day)
    if day > format_local_date(clock.today()):
        raise ValidationError(f"cannot complete '{routine.name}' on {day}: date is in the future")
    return cat


def _check_settings(changes: dict[str, object]) -> None:
    unknown = set(changes) - _SETTINGS_FIELDS
    if unknown:
        raise ValidationError(f"unknown settings: {', '.join(sorted(unknown))}")


class SqliteStore:
    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def _db(self):
        return db.get_db(self.db_path)

    def _fetch_routines(self, conn: sqlite3.Connection) -> list[Routine]:
        rows = conn.execute(
            f"SELECT {_ROUTINE_COLS} FROM routines ORDER BY sort_order, created"  # noqa: S608
        ).fetchall()
        return [row_to_routine(row) for row in rows]

    def routines(self) -> list[Routine]:
        with self._db() as conn:
            return self._fetch_routines(conn)

    def get_routine(self, routine_id: str) -> Routine | None:
        with self._db() as conn:
            row = conn.execute(
                f"SELECT {_ROUTINE_COLS} FROM routines WHERE id = ?",  # noqa: S608
                (routine_id,),
            ).fetchone()
        return row_to_routine(row) if row else None

    def add_routine(self, name: str, categories: Iterable[str], icon: str | None = None) -> Routine:
        with self._db() as conn:
            next_order = conn.execute("SELECT COUNT(*) FROM routines").fetchone()[0]
            routine = Routine(
                id=str(uuid.uuid4()),
                name=name.strip(),
                time_categories=tuple(categories),
                sort_order=next_order,
                icon=icon,
            )
            conn.execute(
                f"INSERT INTO routines ({_ROUTINE_COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",  # noqa: S608
                (
                    routine.id,
                    routine.name,
                    categories_to_text(routine.time_categories),
                    int(routine.is_active),
                    routine.sort_order,
                    int(routine.notification_enabled),
                    routine.notification_time,
                    routine.icon,
                ),
            )
        logger.debug("added routine %s (%s)", routine.name, routine.id)
        return routine

    def update_routine(self, routine_id: str, **changes: object) -> Routine:
        existing = self.get_routine(routine_id)
        if existing is None:
            raise NotFoundError(f"no routine with id '{routine_id}'")
        updated = dataclasses.replace(existing, **changes)
        with self._db() as conn:
            conn.execute(
                "UPDATE routines SET name = ?, time_categories = ?, is_active = ?, sort_order = ?, "
                "notification_enabled = ?, notification_time = ?, icon = ? WHERE id = ?",
                (
                    updated.name,
                    categories_to_text(updated.time_categories),
                    int(updated.is_active),
                    updated.sort_order,
                    int(updated.notification_enabled),
                    updated.notification_time,
                    updated.icon,
                    routine_id,
                ),
            )
        return updated

    def delete_routine(self, routine_id: str) -> None:
        with self._db() as conn:
            cursor = conn.execute("DELETE FROM routines WHERE id = ?", (routine_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"no routine with id '{routine_id}'")

    def _fetch_completions(self, conn: sqlite3.Connection, day: str | None = None) -> list[Completion]:
        if day is None:
            rows = conn.execute(
                f"SELECT {_COMPLETION_COLS} FROM completions ORDER BY date, completed_at"  # noqa: S608
            ).fetchall()
        else:
            rows = conn.execute(
                f"SELECT {_COMPLETION_COLS} FROM completions WHERE date = ? ORDER BY completed_at",  # noqa: S608
                (day,),
            ).fetchall()
        return [row_to_completion(row) for row in rows]

    def completions(self, day: str | None = None) -> list[Completion]:
        with self._db() as conn:
            return self._fetch_completions(conn, day)

    def set_completion(
        self, routine_id: str, day: str, category: str, completed: bool
    ) -> Completion:
        cat = _check_slot(self.get_routine(routine_id), routine_id, day, category)
        completed_at = clock.now().isoformat()
        with self._db() as conn:
            conn.execute(
                "INSERT INTO completions (id, routine_id, date, time_category, completed, completed_at) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT (routine_id, date, time_category) "
                "DO UPDATE SET completed = excluded.completed, completed_at = excluded.completed_at",
                (str(uuid.uuid4()), routine_id, day, str(cat), int(completed), completed_at),
            )
            row = conn.execute(
                f"SELECT {_COMPLETION_COLS} FROM completions "  # noqa: S608
                "WHERE routine_id = ? AND date = ? AND time_category = ?",
                (routine_id, day, str(cat)),
            ).fetchone()
        return row_to_completion(row)

    def snapshot(self) -> Snapshot:
        with self._db() as conn:
            routines = self._fetch_routines(conn)
            completions = self._fetch_completions(conn)
            best = conn.execute("SELECT best_streak FROM progress WHERE id = 1").fetchone()
            unlocked = [
                row[0]
                for row in conn.execute("SELECT key FROM unlocked_achievements ORDER BY seq").fetchall()
            ]
        return Snapshot(routines, completions, best[0] if best else 0, unlocked)

    def record_progress(self, best_streak: int, unlocked: Iterable[str]) -> None:
        with self._db() as conn:
            conn.execute(
                "INSERT INTO progress (id, best_streak) VALUES (1, ?) "
                "ON CONFLICT (id) DO UPDATE SET best_streak = MAX(best_streak, excluded.best_streak)",
                (best_streak,),
            )
            seq = conn.execute("SELECT COALESCE(MAX(seq), 0) FROM unlocked_achievements").fetchone()[0]
            for key in unlocked:
                seq += 1
                conn.execute(
                    "INSERT OR IGNORE INTO unlocked_achievements (key, unlocked_at, seq) VALUES (?, ?, ?)",
                    (key, clock.now().isoformat(), seq),
                )

    def settings(self) -> Settings:
        with self._db() as conn:
            row = conn.execute(
                "SELECT notifications_enabled, am_notification_time, noon_notification_time, "
                "pm_notification_time FROM settings WHERE id = 1"
            ).fetchone()
        return row_to_settings(row) if row else Settings()

    def update_settings(self, **changes: object) -> Settings:
        _check_settings(changes)
        updated = dataclasses.replace(self.settings(), **changes)
        with self._db() as conn:
            conn.execute(
                "INSERT INTO settings (id, notifications_enabled, am_notification_time, "
                "noon_notification_time, pm_notification_time) VALUES (1, ?, ?, ?, ?) "
                "ON CONFLICT (id) DO UPDATE SET notifications_enabled = excluded.notifications_enabled, "
                "am_notification_time = excluded.am_notification_time, "
                "noon_notification_time = excluded.noon_notification_time, "
                "pm_notification_time = excluded.pm_notification_time",
                (
                    int(updated.notifications_enabled),
                    updated.am_notification_time,
                    updated.noon_notification_time,
                    updated.pm_notification_time,
                ),
            )
        return updated


class MemoryStore:
    def __init__(self) -> None:
        self._routines: dict[str, Routine] = {}
        self._completions: dict[tuple[str, str, TimeCategory], Completion] = {}
        self._best_streak = 0
        self._unlocked: dict[str, datetime] = {}
        self._settings = Settings()

    def routines(self) -> list[Routine]:
        return sorted(self._routines.values(), key=lambda r: r.sort_order)

    def get_routine(self, routine_id: str) -> Routine | None:
        return self._routines.get(routine_id)

    def add_routine(self, name: str, categories: Iterable[str], icon: str | None = None) -> Routine:
        routine = Routine(
            id=str(uuid.uuid4()),
            name=name.strip(),
            time_categories=tuple(categories),
            sort_order=len(self._routines),
            icon=icon,
        )
        self._routines[routine.id] = routine
        return routine

    def update_routine(self, routine_id: str, **changes: object) -> Routine:
        existing = self._routines.get(routine_id)
        if existing is None:
            raise NotFoundError(f"no routine with id '{routine_id}'")
        updated = dataclasses.replace(existing, **changes)
        self._routines[routine_id] = updated
        return updated

    def delete_routine(self, routine_id: str) -> None:
        if self._routines.pop(routine_id, None) is None:
            raise NotFoundError(f"no routine with id '{routine_id}'")
        for key in [k for k in self._completions if k[0] == routine_id]:
            del self._completions[key]

    def completions(self, day: str | None = None) -> list[Completion]:
        return [c for c in self._completions.values() if day is None or c.date == day]

    def set_completion(
        self, routine_id: str, day: str, category: str, completed: bool
    ) -> Completion:
        cat = _check_slot(self._routines.get(routine_id), routine_id, day, category)
        key = (routine_id, day, cat)
        existing = self._completions.get(key)
        completion = Completion(
            id=existing.id if existing else str(uuid.uuid4()),
            routine_id=routine_id,
            date=day,
            time_category=cat,
            completed=completed,
            completed_at=clock.now(),
        )
        self._completions[key] = completion
        return completion

    def snapshot(self) -> Snapshot:
        return Snapshot(
            self.routines(), self.completions(), self._best_streak, list(self._unlocked)
        )

    def record_progress(self, best_streak: int, unlocked: Iterable[str]) -> None:
        self._best_streak = max(self._best_streak, best_streak)
        for key in unlocked:
            self._unlocked.setdefault(key, clock.now())

    def settings(self) -> Settings:
        return self._settings

    def update_settings(self, **changes: object) -> Settings:
        _check_settings(changes)
        self._settings = dataclasses.replace(self._settings, **changes)
        return self._settings
