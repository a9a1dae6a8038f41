import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .core.models import Completion, Routine, TimeCategory
from .gamification import (
    Achievement,
    AchievementValues,
    Level,
    StreakMultiplier,
    UnlockedSet,
    achieved_milestones,
    calculate_completion_xp,
    evaluate_unlocks,
    get_achievement,
    get_level_from_xp,
    get_next_level,
    get_next_streak_milestone,
    get_streak_multiplier,
)
from .index import CompletionIndex, active_routines
from .lib.numbers import percent
from .periods import aggregate, category_counts, resolve_window
from .streaks import (
    DEFAULT_LOOKBACK_DAYS,
    all_routines_complete,
    compute_streaks,
    routine_complete,
    streak_series,
)

__all__ = [
    "GamificationStats",
    "RoutineStats",
    "calculate_gamification_stats",
    "calculate_routine_stats",
    "calculate_total_xp",
]

logger = logging.getLogger(__name__)


def _level_dict(level: Level | None) -> dict[str, object] | None:
    if level is None:
        return None
    return {"level": level.level, "name": level.name, "minXP": level.min_xp, "icon": level.icon}


def _achievement_dict(a: Achievement | None) -> dict[str, object] | None:
    if a is None:
        return None
    return {
        "key": a.key,
        "type": str(a.type),
        "name": a.name,
        "description": a.description,
        "icon": a.icon,
        "requirement": a.requirement,
    }


@dataclass(frozen=True)
class GamificationStats:
    total_xp: int
    level: Level
    next_level: Level | None
    next_level_progress: int
    xp_to_next_level: int
    current_streak: int
    longest_streak: int
    best_streak: int
    streak_multiplier: StreakMultiplier
    total_completions: int
    period_completions: int
    total_tasks: int
    completion_rate: int
    perfect_days: int
    total_perfect_days: int
    category_counts: dict[TimeCategory, int]
    period_category_counts: dict[TimeCategory, int]
    unlocked_achievements: list[str]
    newly_unlocked: list[str]
    recent_achievement: Achievement | None
    period_label: str
    start_date: str
    end_date: str

    @property
    def am_completions(self) -> int:
        return self.category_counts[TimeCategory.AM]

    @property
    def noon_completions(self) -> int:
        return self.category_counts[TimeCategory.NOON]

    @property
    def pm_completions(self) -> int:
        return self.category_counts[TimeCategory.PM]

    @property
    def all_day_completions(self) -> int:
        return self.category_counts[TimeCategory.ALL]

    def achievement_values(self) -> AchievementValues:
        return AchievementValues(
            current_streak=self.current_streak,
            best_streak=self.best_streak,
            total_completions=self.total_completions,
            total_perfect_days=self.total_perfect_days,
            level=self.level.level,
            category_counts=self.category_counts,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "totalXP": self.total_xp,
            "level": _level_dict(self.level),
            "nextLevel": _level_dict(self.next_level),
            "nextLevelProgress": self.next_level_progress,
            "xpToNextLevel": self.xp_to_next_level,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "bestStreak": self.best_streak,
            "streakMultiplier": {
                "multiplier": self.streak_multiplier.multiplier,
                "label": self.streak_multiplier.label,
            },
            "totalCompletions": self.total_completions,
            "periodCompletions": self.period_completions,
            "totalTasks": self.total_tasks,
            "completionRate": self.completion_rate,
            "perfectDays": self.perfect_days,
            "totalPerfectDays": self.total_perfect_days,
            "amCompletions": self.am_completions,
            "noonCompletions": self.noon_completions,
            "pmCompletions": self.pm_completions,
            "allDayCompletions": self.all_day_completions,
            "periodCategoryCounts": {str(k): v for k, v in self.period_category_counts.items()},
            "unlockedAchievements": list(self.unlocked_achievements),
            "newlyUnlocked": list(self.newly_unlocked),
            "recentAchievement": _achievement_dict(self.recent_achievement),
            "periodLabel": self.period_label,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass(frozen=True)
class RoutineStats:
    routine_id: str
    routine_name: str
    routine_icon: str
    current_streak: int
    longest_streak: int
    total_completions: int
    period_completions: int
    total_tasks: int
    completion_rate: int
    next_milestone: int | None
    achieved_milestones: list[int] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        return {
            "routineId": self.routine_id,
            "routineName": self.routine_name,
            "routineIcon": self.routine_icon,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "totalCompletions": self.total_completions,
            "periodCompletions": self.period_completions,
            "totalTasks": self.total_tasks,
            "completionRate": self.completion_rate,
            "nextMilestone": self.next_milestone,
            "achievedMilestones": list(self.achieved_milestones),
        }


def calculate_total_xp(routines: Sequence[Routine], index: CompletionIndex, today: str) -> int:
    """Sum XP over every completion, each at the streak as of its own day."""
    active = active_routines(routines)
    slots = index.slots((r.id for r in active), until=today)
    if not slots:
        return 0
    series = streak_series(all_routines_complete(active, index), slots[0][1], today)
    return sum(calculate_completion_xp(series[day]) for _routine_id, day, _cat in slots)


def calculate_gamification_stats(
    routines: Sequence[Routine],
    completions: Iterable[Completion],
    period: str | int,
    today: str,
    saved_best_streak: int = 0,
    unlocked: Iterable[str] = (),
    lookback_days: int | None = None,
) -> GamificationStats:
    lookback = DEFAULT_LOOKBACK_DAYS if lookback_days is None else lookback_days
    window = resolve_window(period, today)
    active = active_routines(routines)
    index = CompletionIndex(routines, completions)

    streaks = compute_streaks(all_routines_complete(active, index), today, lookback)
    best_streak = max(saved_best_streak, streaks.longest)
    totals = aggregate(active, index, window.start, window.end)

    lifetime_counts = category_counts(active, index, end=today)
    total_completions = len(index.slots((r.id for r in active), until=today))
    total_perfect_days = sum(
        1 for day in index.days(until=today) if index.all_complete(active, day)
    )

    total_xp = calculate_total_xp(active, index, today)
    level = get_level_from_xp(total_xp)
    next_level = get_next_level(total_xp)

    unlocked_set = UnlockedSet(unlocked)
    values = AchievementValues(
        current_streak=streaks.current,
        best_streak=best_streak,
        total_completions=total_completions,
        total_perfect_days=total_perfect_days,
        level=level.level,
        category_counts=lifetime_counts,
    )
    newly = unlocked_set.merge(evaluate_unlocks(values))
    if newly:
        logger.info("achievements unlocked: %s", ", ".join(newly))
    recent_key = newly[-1] if newly else (unlocked_set.keys()[-1] if unlocked_set else None)

    return GamificationStats(
        total_xp=total_xp,
        level=level,
        next_level=next_level.next_level,
        next_level_progress=next_level.progress,
        xp_to_next_level=next_level.xp_needed,
        current_streak=streaks.current,
        longest_streak=streaks.longest,
        best_streak=best_streak,
        streak_multiplier=get_streak_multiplier(streaks.current),
        total_completions=total_completions,
        period_completions=totals.completed_count,
        total_tasks=totals.total_tasks,
        completion_rate=totals.completion_rate,
        perfect_days=totals.perfect_days,
        total_perfect_days=total_perfect_days,
        category_counts=lifetime_counts,
        period_category_counts=totals.by_category,
        unlocked_achievements=unlocked_set.keys(),
        newly_unlocked=newly,
        recent_achievement=get_achievement(recent_key) if recent_key else None,
        period_label=window.label,
        start_date=window.start,
        end_date=window.end,
    )


def _routine_sort_key(s: RoutineStats) -> tuple[int, int, str]:
    return (-s.completion_rate, -s.current_streak, s.routine_name)


def calculate_routine_stats(
    routines: Sequence[Routine],
    completions: Iterable[Completion],
    period: str | int,
    today: str,
    lookback_days: int | None = None,
) -> list[RoutineStats]:
    lookback = DEFAULT_LOOKBACK_DAYS if lookback_days is None else lookback_days
    window = resolve_window(period, today)
    window_days = len(window.days())
    index = CompletionIndex(routines, completions)

    stats = []
    for routine in active_routines(routines):
        streaks = compute_streaks(routine_complete(routine, index), today, lookback)
        slots = index.slots([routine.id], until=today)
        in_window = sum(1 for _rid, day, _cat in slots if day in window)
        total_tasks = window_days * len(routine.time_categories)
        milestone = get_next_streak_milestone(streaks.current)
        stats.append(
            RoutineStats(
                routine_id=routine.id,
                routine_name=routine.name,
                routine_icon=routine.icon or "✅",
                current_streak=streaks.current,
                longest_streak=streaks.longest,
                total_completions=len(slots),
                period_completions=in_window,
                total_tasks=total_tasks,
                completion_rate=percent(in_window, total_tasks),
                next_milestone=milestone.target if milestone else None,
                achieved_milestones=achieved_milestones(streaks.current),
            )
        )
    return sorted(stats, key=_routine_sort_key)
