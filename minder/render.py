from collections.abc import Sequence

from .core.models import Completion, Routine
from .gamification import (
    ACHIEVEMENTS,
    AchievementValues,
    get_achievement,
    get_achievement_progress,
)
from .index import CompletionIndex, active_routines
from .lib.ansi import bold, cyan, dim, gold, gray, green, orange, white
from .stats import GamificationStats, RoutineStats

__all__ = [
    "progress_bar",
    "render_achievements",
    "render_day",
    "render_routine_list",
    "render_routine_stats",
    "render_stats",
]


def progress_bar(pct: int, width: int = 20) -> str:
    filled = max(0, min(width, round(pct / 100 * width)))
    return green("█" * filled) + gray("░" * (width - filled))


def _fmt_categories(routine: Routine) -> str:
    return "/".join(str(c) for c in routine.time_categories)


def render_routine_list(routines: Sequence[Routine]) -> str:
    if not routines:
        return "no routines yet"
    lines = []
    for r in routines:
        icon = r.icon or "✅"
        name = r.name if r.is_active else dim(f"{r.name} (paused)")
        lines.append(f"  {icon} {name}  {cyan(_fmt_categories(r))}  {gray(f'[{r.id[:8]}]')}")
    return "\n".join(lines)


def render_day(day: str, routines: Sequence[Routine], completions: Sequence[Completion]) -> str:
    active = active_routines(routines)
    if not active:
        return "no active routines"
    index = CompletionIndex(routines, completions)
    lines = [bold(white(day))]
    for r in active:
        marks = " ".join(
            f"{green('✓') if index.is_done(r.id, day, cat) else '□'} {cat}" for cat in r.time_categories
        )
        lines.append(f"  {r.icon or '✅'} {r.name:<24} {marks}")
    return "\n".join(lines)


def render_stats(stats: GamificationStats) -> str:
    lvl = stats.level
    lines = [
        bold(white(f"{stats.period_label.upper()}:")),
        f"  level:      {lvl.icon} {lvl.level} {lvl.name}  {stats.total_xp} XP",
    ]
    if stats.next_level:
        lines.append(
            f"  next:       {progress_bar(stats.next_level_progress)} "
            f"{stats.xp_to_next_level} XP to {stats.next_level.name}"
        )
    else:
        lines.append(f"  next:       {gold('max level')}")
    streak_line = f"  streak:     {stats.current_streak}d (best {stats.best_streak}d)"
    if stats.streak_multiplier.label:
        streak_line += (
            f"  {orange(f'{stats.streak_multiplier.label} x{stats.streak_multiplier.multiplier:g}')}"
        )
    lines += [
        streak_line,
        f"  rate:       {stats.completion_rate}% ({stats.period_completions}/{stats.total_tasks})",
        f"  perfect:    {stats.perfect_days} in period, {stats.total_perfect_days} total",
        f"  time of day: AM {stats.am_completions} · NOON {stats.noon_completions} · "
        f"PM {stats.pm_completions} · ALL {stats.all_day_completions}",
    ]
    for key in stats.newly_unlocked:
        a = get_achievement(key)
        if a:
            lines.append(f"  {gold('★ unlocked')} {a.icon} {a.name}")
    return "\n".join(lines)


def render_routine_stats(stats: Sequence[RoutineStats]) -> str:
    if not stats:
        return "no active routines"
    lines = []
    for s in stats:
        milestone = f"next {s.next_milestone}d" if s.next_milestone else gold("all milestones")
        lines.append(
            f"  {s.routine_icon} {s.routine_name:<24} {s.completion_rate:>3}%  "
            f"streak {s.current_streak}d (best {s.longest_streak}d)  {dim(milestone)}"
        )
    return "\n".join(lines)


def render_achievements(unlocked: Sequence[str], values: AchievementValues) -> str:
    lines = [bold(white("ACHIEVEMENTS:"))]
    for a in ACHIEVEMENTS:
        if a.key in unlocked:
            lines.append(f"  {a.icon} {a.name}  {dim(a.description)}")
            continue
        p = get_achievement_progress(a, values)
        lines.append(f"  {gray('·')} {gray(a.name)}  {progress_bar(p.progress, 10)} {dim(p.label)}")
    return "\n".join(lines)
