import math

__all__ = ["percent", "round_half_up"]


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def percent(part: int, whole: int) -> int:
    """Integer percentage clamped to 0..100; 0 when there is nothing to measure."""
    if whole <= 0:
        return 0
    return max(0, min(100, round_half_up(part / whole * 100)))
