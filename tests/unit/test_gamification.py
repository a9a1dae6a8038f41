import pytest

from minder.core.models import TimeCategory
from minder.gamification import (
    ACHIEVEMENTS,
    LEVELS,
    AchievementValues,
    UnlockedSet,
    achieved_milestones,
    calculate_completion_xp,
    evaluate_unlocks,
    get_achievement,
    get_achievement_progress,
    get_level_from_xp,
    get_next_level,
    get_next_streak_milestone,
    get_streak_multiplier,
)


@pytest.mark.parametrize(
    ("streak", "multiplier", "label"),
    [
        (0, 1.0, None),
        (6, 1.0, None),
        (7, 1.25, "Week Warrior"),
        (13, 1.25, "Week Warrior"),
        (14, 1.5, "Streak Bonus"),
        (30, 2.0, "On Fire!"),
        (400, 2.0, "On Fire!"),
    ],
)
def test_streak_multiplier_tiers(streak, multiplier, label):
    tier = get_streak_multiplier(streak)
    assert tier.multiplier == multiplier
    assert tier.label == label


@pytest.mark.parametrize(("streak", "xp"), [(0, 10), (7, 13), (14, 15), (30, 20)])
def test_completion_xp(streak, xp):
    assert calculate_completion_xp(streak) == xp


def test_levels_ascending():
    assert [lvl.min_xp for lvl in LEVELS] == sorted(lvl.min_xp for lvl in LEVELS)
    assert LEVELS[0].min_xp == 0


@pytest.mark.parametrize(
    ("xp", "name"),
    [(0, "Novice"), (99, "Novice"), (100, "Apprentice"), (1499, "Practitioner"), (15000, "Legend")],
)
def test_level_from_xp(xp, name):
    assert get_level_from_xp(xp).name == name


def test_next_level_from_zero():
    nxt = get_next_level(0)
    assert nxt.next_level.name == "Apprentice"
    assert nxt.progress == 0
    assert nxt.xp_needed == 100


def test_next_level_midway():
    nxt = get_next_level(300)
    assert nxt.next_level.name == "Practitioner"
    assert nxt.progress == 50
    assert nxt.xp_needed == 200


def test_next_level_at_top():
    nxt = get_next_level(20000)
    assert nxt.next_level is None
    assert nxt.xp_needed == 0
    assert nxt.progress == 100


def test_achievement_catalogue_keys_unique():
    keys = [a.key for a in ACHIEVEMENTS]
    assert len(keys) == len(set(keys)) == 22
    assert get_achievement("streak_7").name == "Week Warrior"
    assert get_achievement("nope") is None


def test_progress_toward_streak_achievement():
    progress = get_achievement_progress(get_achievement("streak_21"), AchievementValues(best_streak=7))
    assert progress.current == 7
    assert progress.progress == 33
    assert progress.remaining == 14
    assert progress.label == "7/21 day streak"


def test_progress_caps_at_requirement():
    progress = get_achievement_progress(
        get_achievement("complete_10"), AchievementValues(total_completions=25)
    )
    assert progress.progress == 100
    assert progress.remaining == 0


def test_time_category_progress_reads_its_category():
    values = AchievementValues(category_counts={TimeCategory.AM: 25, TimeCategory.PM: 50})
    assert get_achievement_progress(get_achievement("am_50"), values).progress == 50
    assert get_achievement_progress(get_achievement("pm_50"), values).remaining == 0
    assert get_achievement_progress(get_achievement("noon_50"), values).current == 0


def test_level_achievement_progress():
    progress = get_achievement_progress(get_achievement("level_3"), AchievementValues(level=2))
    assert progress.label == "Level 2/3"
    assert progress.progress == 67


def test_evaluate_unlocks_in_catalogue_order():
    values = AchievementValues(
        best_streak=21, total_completions=10, total_perfect_days=1, level=2
    )
    assert evaluate_unlocks(values) == [
        "streak_7",
        "streak_21",
        "complete_10",
        "perfect_day_1",
        "level_2",
    ]


def test_streak_achievements_use_best_streak():
    assert "streak_7" in evaluate_unlocks(AchievementValues(current_streak=0, best_streak=7))
    assert "streak_7" not in evaluate_unlocks(AchievementValues(current_streak=7, best_streak=0))


def test_nothing_unlocked_for_fresh_user():
    assert evaluate_unlocks(AchievementValues()) == []


def test_unlocked_set_only_grows():
    unlocked = UnlockedSet(["streak_7", "complete_10"])
    added = unlocked.merge(["complete_10", "perfect_day_1"])
    assert added == ["perfect_day_1"]
    assert unlocked.merge([]) == []
    assert unlocked.keys() == ["streak_7", "complete_10", "perfect_day_1"]
    assert "streak_7" in unlocked
    assert len(unlocked) == 3


def test_unlocked_set_dedupes_initial_keys():
    assert UnlockedSet(["a", "b", "a"]).keys() == ["a", "b"]


def test_next_milestone_from_zero():
    milestone = get_next_streak_milestone(0)
    assert milestone.target == 7
    assert milestone.remaining == 7
    assert milestone.progress == 0


def test_next_milestone_between_tiers():
    milestone = get_next_streak_milestone(10)
    assert milestone.target == 21
    assert milestone.remaining == 11
    assert milestone.progress == 21


def test_no_milestone_past_the_last():
    assert get_next_streak_milestone(365) is None


def test_achieved_milestones():
    assert achieved_milestones(30) == [7, 21, 30]
    assert achieved_milestones(6) == []
