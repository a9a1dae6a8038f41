"""XP, levels, streak multipliers and achievements.

Everything here is a pure function of numbers the streak calculator and the
period aggregator already produced. The only state is `UnlockedSet`, the
ratchet of earned achievement keys that callers persist between runs.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from .core.models import TimeCategory
from .lib.numbers import round_half_up

__all__ = [
    "ACHIEVEMENTS",
    "LEVELS",
    "STREAK_MILESTONES",
    "XP_PER_COMPLETION",
    "Achievement",
    "AchievementProgress",
    "AchievementType",
    "AchievementValues",
    "Level",
    "NextLevel",
    "StreakMilestone",
    "StreakMultiplier",
    "UnlockedSet",
    "achieved_milestones",
    "calculate_completion_xp",
    "evaluate_unlocks",
    "get_achievement",
    "get_achievement_progress",
    "get_level_from_xp",
    "get_next_level",
    "get_next_streak_milestone",
    "get_streak_multiplier",
]

XP_PER_COMPLETION = 10


# ── streak multiplier ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StreakMultiplier:
    multiplier: float = 1.0
    label: str | None = None
    icon: str | None = None


# highest tier first; only the first match applies
STREAK_MULTIPLIERS: tuple[tuple[int, StreakMultiplier], ...] = (
    (30, StreakMultiplier(2.0, "On Fire!", "🔥")),
    (14, StreakMultiplier(1.5, "Streak Bonus", "💪")),
    (7, StreakMultiplier(1.25, "Week Warrior", "⭐")),
)


def get_streak_multiplier(streak: int) -> StreakMultiplier:
    for min_days, tier in STREAK_MULTIPLIERS:
        if streak >= min_days:
            return tier
    return StreakMultiplier()


def calculate_completion_xp(streak: int) -> int:
    return round_half_up(XP_PER_COMPLETION * get_streak_multiplier(streak).multiplier)


# ── levels ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Level:
    level: int
    name: str
    min_xp: int
    icon: str


LEVELS: tuple[Level, ...] = (
    Level(1, "Novice", 0, "🌱"),
    Level(2, "Apprentice", 100, "🌿"),
    Level(3, "Practitioner", 500, "🌳"),
    Level(4, "Expert", 1500, "⭐"),
    Level(5, "Master", 5000, "🏆"),
    Level(6, "Legend", 15000, "👑"),
)


@dataclass(frozen=True)
class NextLevel:
    next_level: Level | None
    xp_needed: int
    progress: int


def get_level_from_xp(xp: int) -> Level:
    for level in reversed(LEVELS):
        if xp >= level.min_xp:
            return level
    return LEVELS[0]


def get_next_level(xp: int) -> NextLevel:
    current = get_level_from_xp(xp)
    idx = LEVELS.index(current)
    if idx >= len(LEVELS) - 1:
        return NextLevel(next_level=None, xp_needed=0, progress=100)
    nxt = LEVELS[idx + 1]
    span = nxt.min_xp - current.min_xp
    progress = round_half_up((xp - current.min_xp) / span * 100)
    return NextLevel(next_level=nxt, xp_needed=nxt.min_xp - xp, progress=progress)


# ── achievements ─────────────────────────────────────────────────────────────


class AchievementType(StrEnum):
    STREAK = "streak"
    COMPLETION = "completion"
    PERFECT_DAY = "perfect_day"
    TIME_CATEGORY = "time_category"
    LEVEL = "level"


@dataclass(frozen=True)
class Achievement:
    key: str
    type: AchievementType
    name: str
    description: str
    icon: str
    requirement: int
    category: TimeCategory | None = None


def _a(key, type_, name, description, icon, requirement, category=None) -> Achievement:
    return Achievement(key, AchievementType(type_), name, description, icon, requirement, category)


ACHIEVEMENTS: tuple[Achievement, ...] = (
    _a("streak_7", "streak", "Week Warrior", "7-day streak", "🔥", 7),
    _a("streak_21", "streak", "Habit Former", "21-day streak", "💪", 21),
    _a("streak_30", "streak", "Monthly Master", "30-day streak", "⭐", 30),
    _a("streak_50", "streak", "Unstoppable", "50-day streak", "🚀", 50),
    _a("streak_100", "streak", "Century Club", "100-day streak", "💯", 100),
    _a("streak_365", "streak", "Year of Dedication", "365-day streak", "👑", 365),
    _a("complete_10", "completion", "Getting Started", "Complete 10 tasks", "✅", 10),
    _a("complete_50", "completion", "Building Momentum", "Complete 50 tasks", "📈", 50),
    _a("complete_100", "completion", "Centurion", "Complete 100 tasks", "💯", 100),
    _a("complete_500", "completion", "High Achiever", "Complete 500 tasks", "🏅", 500),
    _a("complete_1000", "completion", "Thousand Strong", "Complete 1000 tasks", "🎖️", 1000),
    _a("perfect_day_1", "perfect_day", "Perfect Day", "Complete all daily tasks", "🌟", 1),
    _a("perfect_day_7", "perfect_day", "Perfect Week", "7 perfect days", "🌈", 7),
    _a("perfect_day_30", "perfect_day", "Perfect Month", "30 perfect days", "🏆", 30),
    _a("am_50", "time_category", "Early Bird", "Complete 50 AM tasks", "🌅", 50, TimeCategory.AM),
    _a("noon_50", "time_category", "Noon Champion", "Complete 50 NOON tasks", "☀️", 50, TimeCategory.NOON),
    _a("pm_50", "time_category", "Night Owl", "Complete 50 PM tasks", "🌙", 50, TimeCategory.PM),
    _a("level_2", "level", "Rising Star", "Reach Level 2", "🌿", 2),
    _a("level_3", "level", "On the Rise", "Reach Level 3", "🌳", 3),
    _a("level_4", "level", "Expert Status", "Reach Level 4", "⭐", 4),
    _a("level_5", "level", "Master Achiever", "Reach Level 5", "🏆", 5),
    _a("level_6", "level", "Legendary", "Reach Level 6", "👑", 6),
)

_BY_KEY = {a.key: a for a in ACHIEVEMENTS}


def get_achievement(key: str) -> Achievement | None:
    return _BY_KEY.get(key)


@dataclass(frozen=True)
class AchievementValues:
    """The counters achievements are measured against."""

    current_streak: int = 0
    best_streak: int = 0
    total_completions: int = 0
    total_perfect_days: int = 0
    level: int = 1
    category_counts: Mapping[TimeCategory, int] | None = None

    def value_for(self, achievement: Achievement) -> int:
        match achievement.type:
            case AchievementType.STREAK:
                return self.best_streak
            case AchievementType.COMPLETION:
                return self.total_completions
            case AchievementType.PERFECT_DAY:
                return self.total_perfect_days
            case AchievementType.TIME_CATEGORY:
                counts = self.category_counts or {}
                return counts.get(achievement.category, 0) if achievement.category else 0
            case AchievementType.LEVEL:
                return self.level
        return 0


@dataclass(frozen=True)
class AchievementProgress:
    achievement: Achievement
    current: int
    target: int
    progress: int
    remaining: int
    label: str


def _progress_label(achievement: Achievement, current: int) -> str:
    req = achievement.requirement
    match achievement.type:
        case AchievementType.STREAK:
            return f"{current}/{req} day streak"
        case AchievementType.PERFECT_DAY:
            return f"{current}/{req} perfect days"
        case AchievementType.LEVEL:
            return f"Level {current}/{req}"
    return f"{current}/{req} tasks"


def get_achievement_progress(
    achievement: Achievement, values: AchievementValues
) -> AchievementProgress:
    current = values.value_for(achievement)
    req = achievement.requirement
    return AchievementProgress(
        achievement=achievement,
        current=current,
        target=req,
        progress=round_half_up(min(current, req) / req * 100),
        remaining=max(req - current, 0),
        label=_progress_label(achievement, current),
    )


def evaluate_unlocks(values: AchievementValues) -> list[str]:
    """Keys whose condition holds right now, in catalogue order."""
    return [a.key for a in ACHIEVEMENTS if values.value_for(a) >= a.requirement]


class UnlockedSet:
    """Insertion-ordered set of earned achievement keys that only ever grows."""

    def __init__(self, keys: Iterable[str] = ()):
        self._keys: dict[str, None] = {}
        for key in keys:
            self._keys.setdefault(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self):
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def keys(self) -> list[str]:
        return list(self._keys)

    def merge(self, keys: Iterable[str]) -> list[str]:
        """Add keys, returning the ones not seen before in the order added."""
        added = []
        for key in keys:
            if key not in self._keys:
                self._keys[key] = None
                added.append(key)
        return added


# ── streak milestones ────────────────────────────────────────────────────────

STREAK_MILESTONES: tuple[int, ...] = (7, 21, 30, 50, 100, 365)


@dataclass(frozen=True)
class StreakMilestone:
    target: int
    remaining: int
    progress: int


def get_next_streak_milestone(streak: int) -> StreakMilestone | None:
    upcoming = [m for m in STREAK_MILESTONES if m > streak]
    if not upcoming:
        return None
    target = upcoming[0]
    idx = STREAK_MILESTONES.index(target)
    previous = STREAK_MILESTONES[idx - 1] if idx > 0 else 0
    progress = round_half_up((streak - previous) / (target - previous) * 100)
    return StreakMilestone(target=target, remaining=target - streak, progress=progress)


def achieved_milestones(streak: int) -> list[int]:
    return [m for m in STREAK_MILESTONES if streak >= m]
