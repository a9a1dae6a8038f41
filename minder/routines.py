from fncli import UsageError, cli

from .core.errors import ConflictError, NotFoundError, ValidationError
from .core.models import Completion, Routine, parse_category
from .lib import clock
from .lib.dates import format_local_date, parse_day_ref
from .lib.errors import echo
from .lib.fuzzy import find_in_pool
from .render import render_day, render_routine_list
from .store import SqliteStore, Store

__all__ = [
    "resolve_routine",
    "toggle_completion",
]


def resolve_routine(store: Store, ref: str) -> Routine:
    routine = find_in_pool(ref, store.routines())
    if routine is None:
        raise NotFoundError(f"no routine matching '{ref}'")
    return routine


def _check_name_free(store: Store, name: str, exclude: str | None = None) -> None:
    taken = next(
        (r for r in store.routines() if r.name.lower() == name.lower() and r.id != exclude), None
    )
    if taken:
        raise ConflictError(f"a routine named '{taken.name}' already exists")


def _split_categories(text: str) -> list[str]:
    return [part for part in text.replace(" ", ",").split(",") if part]


def toggle_completion(
    store: Store, routine: Routine, day: str, category: str | None = None
) -> Completion:
    """Flip one (routine, day, category) slot. Single-category routines need no category."""
    if category is None:
        if len(routine.time_categories) != 1:
            options = ", ".join(str(c) for c in routine.time_categories)
            raise ValidationError(f"'{routine.name}' has several times of day, pick one of {options}")
        cat = routine.time_categories[0]
    else:
        cat = parse_category(category)
    current = next(
        (
            c
            for c in store.completions(day)
            if c.routine_id == routine.id and c.time_category == cat
        ),
        None,
    )
    completed = not (current is not None and current.completed)
    return store.set_completion(routine.id, day, cat, completed)


# ── cli ──────────────────────────────────────────────────────────────────────


@cli("minder", name="add", flags={"name": [], "categories": ["-c", "--categories"], "icon": ["-i", "--icon"]})
def add(name: list[str] | None = None, categories: str = "ALL", icon: str | None = None) -> None:
    """Add a routine: `minder add "stretch" -c AM,PM`"""
    if not name:
        raise UsageError('Usage: minder add <name> -c AM,NOON,PM,ALL')
    store = SqliteStore()
    title = " ".join(name)
    _check_name_free(store, title)
    routine = store.add_routine(title, _split_categories(categories), icon=icon)
    echo(f"+ {routine.name}  {'/'.join(str(c) for c in routine.time_categories)}")


@cli("minder", name="ls")
def ls() -> None:
    """List routines"""
    echo(render_routine_list(SqliteStore().routines()))


@cli("minder", name="rm", flags={"ref": []})
def rm(ref: list[str]) -> None:
    """Delete a routine and its completion history"""
    store = SqliteStore()
    routine = resolve_routine(store, " ".join(ref))
    store.delete_routine(routine.id)
    echo(f"✗ {routine.name}")


@cli("minder", name="pause", flags={"ref": []})
def pause(ref: list[str]) -> None:
    """Exclude a routine from stats, keeping its history"""
    store = SqliteStore()
    routine = resolve_routine(store, " ".join(ref))
    store.update_routine(routine.id, is_active=False)
    echo(f"paused: {routine.name}")


@cli("minder", name="resume", flags={"ref": []})
def resume(ref: list[str]) -> None:
    """Count a paused routine again"""
    store = SqliteStore()
    routine = resolve_routine(store, " ".join(ref))
    store.update_routine(routine.id, is_active=True)
    echo(f"resumed: {routine.name}")


@cli("minder", name="rename", flags={"ref": [], "to": ["-t", "--to"]})
def rename(ref: list[str], to: str | None = None) -> None:
    """Rename a routine: `minder rename stretch --to "evening stretch"`"""
    if not to:
        raise UsageError("Usage: minder rename <routine> --to <new name>")
    store = SqliteStore()
    routine = resolve_routine(store, " ".join(ref))
    if routine.name == to:
        raise ValidationError(f"cannot rename '{routine.name}' to itself")
    _check_name_free(store, to, exclude=routine.id)
    store.update_routine(routine.id, name=to)
    echo(f"→ {to}")


@cli(
    "minder",
    name="check",
    flags={"ref": [], "category": ["-c", "--category"], "day": ["-d", "--date"]},
)
def check(ref: list[str], category: str | None = None, day: str | None = None) -> None:
    """Toggle a routine for a day (default today)"""
    store = SqliteStore()
    routine = resolve_routine(store, " ".join(ref))
    when = parse_day_ref(day, format_local_date(clock.today()))
    completion = toggle_completion(store, routine, when, category)
    mark = "✓" if completion.completed else "□"
    echo(f"{mark} {routine.name} {completion.time_category} {when}")


@cli("minder", name="today", flags={"day": ["-d", "--date"]})
def today(day: str | None = None) -> None:
    """Show every active routine for a day"""
    store = SqliteStore()
    when = parse_day_ref(day, format_local_date(clock.today()))
    echo(render_day(when, store.routines(), store.completions(when)))
