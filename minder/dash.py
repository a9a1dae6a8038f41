import json
import logging

from fncli import UsageError, cli

from . import config
from .lib import clock
from .lib.dates import format_local_date
from .lib.errors import echo
from .periods import resolve_window
from .render import render_achievements, render_routine_stats, render_stats
from .stats import (
    GamificationStats,
    RoutineStats,
    calculate_gamification_stats,
    calculate_routine_stats,
)
from .store import SqliteStore, Store

__all__ = ["load_gamification_stats", "load_routine_stats"]

logger = logging.getLogger(__name__)


def load_gamification_stats(
    store: Store, period: str | int | None = None, today: str | None = None
) -> GamificationStats:
    """Compute dashboard stats from one snapshot and persist the ratchets.

    The best streak and the unlocked achievements only ever grow, so both are
    written back after every computation.
    """
    snap = store.snapshot()
    stats = calculate_gamification_stats(
        snap.routines,
        snap.completions,
        period or config.get_default_period(),
        today or format_local_date(clock.today()),
        saved_best_streak=snap.best_streak,
        unlocked=snap.unlocked,
        lookback_days=config.get_lookback_days(),
    )
    if stats.best_streak > snap.best_streak or stats.newly_unlocked:
        logger.debug(
            "recording progress: best streak %d, %d new achievements",
            stats.best_streak,
            len(stats.newly_unlocked),
        )
        store.record_progress(stats.best_streak, stats.newly_unlocked)
    return stats


def load_routine_stats(
    store: Store, period: str | int | None = None, today: str | None = None
) -> list[RoutineStats]:
    snap = store.snapshot()
    return calculate_routine_stats(
        snap.routines,
        snap.completions,
        period or config.get_default_period(),
        today or format_local_date(clock.today()),
        lookback_days=config.get_lookback_days(),
    )


# ── cli ──────────────────────────────────────────────────────────────────────


def _show_stats(period: str | None = None, as_json: bool = False) -> None:
    result = load_gamification_stats(SqliteStore(), period)
    if as_json:
        echo(json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
        return
    echo(render_stats(result))


@cli("minder", name="stats", flags={"period": ["-p", "--period"], "as_json": ["--json"]})
def stats(period: str | None = None, as_json: bool = False) -> None:
    """Show streaks, completion rate, XP and level"""
    _show_stats(period, as_json)


@cli("minder", name="streaks", flags={"period": ["-p", "--period"], "as_json": ["--json"]})
def streaks(period: str | None = None, as_json: bool = False) -> None:
    """Per-routine streaks and completion rates"""
    result = load_routine_stats(SqliteStore(), period)
    if as_json:
        echo(json.dumps([s.as_dict() for s in result], ensure_ascii=False, indent=2))
        return
    echo(render_routine_stats(result))


@cli("minder", name="achievements")
def achievements() -> None:
    """List achievements with progress toward the locked ones"""
    result = load_gamification_stats(SqliteStore())
    echo(render_achievements(result.unlocked_achievements, result.achievement_values()))


_ON_OFF = {"on": True, "off": False}


@cli(
    "minder",
    name="settings",
    flags={"notify": ["-n", "--notify"], "am": ["--am"], "noon": ["--noon"], "pm": ["--pm"]},
)
def settings(
    notify: str | None = None,
    am: str | None = None,
    noon: str | None = None,
    pm: str | None = None,
) -> None:
    """Show or change notification settings: `minder settings --notify on --am 07:30`"""
    store = SqliteStore()
    changes: dict[str, object] = {}
    if notify is not None:
        if notify.lower() not in _ON_OFF:
            raise UsageError("Usage: minder settings --notify on|off")
        changes["notifications_enabled"] = _ON_OFF[notify.lower()]
    for field, value in (("am", am), ("noon", noon), ("pm", pm)):
        if value is not None:
            changes[f"{field}_notification_time"] = value
    s = store.update_settings(**changes) if changes else store.settings()
    state = "on" if s.notifications_enabled else "off"
    echo(f"notifications: {state}")
    echo(f"  AM   {s.am_notification_time}")
    echo(f"  NOON {s.noon_notification_time}")
    echo(f"  PM   {s.pm_notification_time}")


@cli("minder", name="config", flags={"args": []})
def config_cmd(args: list[str] | None = None) -> None:
    """Show config, or set a key: `minder config lookback_days 90`"""
    if not args:
        echo(f"lookback_days: {config.get_lookback_days()}")
        echo(f"default_period: {config.get_default_period()}")
        echo(f"log_level: {config.get_log_level()}")
        return
    if len(args) != 2:
        raise UsageError("Usage: minder config <key> <value>")
    key, raw = args
    if key == "default_period":
        resolve_window(raw, format_local_date(clock.today()))
    value = config.set_value(key, raw)
    echo(f"{key}: {value}")


def dashboard() -> None:
    _show_stats()
