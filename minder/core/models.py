import dataclasses
import re
from datetime import datetime
from enum import StrEnum

from ..lib.dates import parse_local_date
from .errors import ValidationError


class TimeCategory(StrEnum):
    AM = "AM"
    NOON = "NOON"
    PM = "PM"
    ALL = "ALL"


_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

CATEGORY_ORDER: tuple[TimeCategory, ...] = (
    TimeCategory.AM,
    TimeCategory.NOON,
    TimeCategory.PM,
    TimeCategory.ALL,
)


def parse_category(value: str | TimeCategory) -> TimeCategory:
    try:
        return TimeCategory(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"unknown time category '{value}' (expected AM, NOON, PM or ALL)"
        ) from None


def normalize_categories(values) -> tuple[TimeCategory, ...]:
    """Dedupe and order categories AM -> NOON -> PM -> ALL."""
    seen = {parse_category(v) for v in values}
    return tuple(c for c in CATEGORY_ORDER if c in seen)


@dataclasses.dataclass(frozen=True)
class Routine:
    id: str
    name: str
    time_categories: tuple[TimeCategory, ...]
    is_active: bool = True
    sort_order: int = 0
    notification_enabled: bool = False
    notification_time: str | None = None
    icon: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("routine name cannot be empty")
        categories = normalize_categories(self.time_categories)
        if not categories:
            raise ValidationError(f"routine '{self.name}' needs at least one time category")
        object.__setattr__(self, "time_categories", categories)
        if self.notification_time is not None and not _CLOCK_RE.match(self.notification_time):
            raise ValidationError(f"notification time must be HH:MM, got {self.notification_time!r}")


@dataclasses.dataclass(frozen=True)
class Completion:
    id: str
    routine_id: str
    date: str
    time_category: TimeCategory
    completed: bool = True
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        parse_local_date(self.date)
        object.__setattr__(self, "time_category", parse_category(self.time_category))


@dataclasses.dataclass(frozen=True)
class Settings:
    notifications_enabled: bool = False
    am_notification_time: str = "08:00"
    noon_notification_time: str = "12:00"
    pm_notification_time: str = "20:00"

    def __post_init__(self) -> None:
        for name in ("am_notification_time", "noon_notification_time", "pm_notification_time"):
            value = getattr(self, name)
            if not isinstance(value, str) or not _CLOCK_RE.match(value):
                raise ValidationError(f"{name} must be HH:MM, got {value!r}")
