from datetime import date, datetime
from typing import cast

from minder.core.models import Completion, Routine, Settings, TimeCategory

RoutineRow = tuple[object, ...]
CompletionRow = tuple[object, ...]


def _parse_datetime_optional(val) -> datetime | None:
    """Parse an optional datetime value that may be str or numeric timestamp."""
    if isinstance(val, str) and val:
        try:
            return datetime.fromisoformat(val)
        except ValueError:
            return datetime.combine(date.fromisoformat(val), datetime.min.time())
    elif isinstance(val, (int, float)):
        return datetime.fromtimestamp(val)
    return None


def categories_to_text(categories) -> str:
    return ",".join(str(c) for c in categories)


def text_to_categories(text: str) -> tuple[TimeCategory, ...]:
    return tuple(TimeCategory(part) for part in text.split(",") if part)


def row_to_routine(row: RoutineRow) -> Routine:
    """
    Converts a raw database row from the routines table into a Routine.
    Expected row format: (id, name, time_categories, is_active, sort_order, notification_enabled, notification_time, icon)
    """
    return Routine(
        id=cast(str, row[0]),
        name=cast(str, row[1]),
        time_categories=text_to_categories(cast(str, row[2])),
        is_active=bool(row[3]),
        sort_order=cast(int, row[4]) or 0,
        notification_enabled=bool(row[5]) if len(row) > 5 else False,
        notification_time=cast(str, row[6]) if len(row) > 6 and row[6] is not None else None,
        icon=cast(str, row[7]) if len(row) > 7 and row[7] is not None else None,
    )


def row_to_completion(row: CompletionRow) -> Completion:
    """
    Converts a raw database row from the completions table into a Completion.
    Expected row format: (id, routine_id, date, time_category, completed, completed_at)
    """
    return Completion(
        id=cast(str, row[0]),
        routine_id=cast(str, row[1]),
        date=cast(str, row[2]),
        time_category=TimeCategory(cast(str, row[3])),
        completed=bool(row[4]),
        completed_at=_parse_datetime_optional(row[5]) if len(row) > 5 else None,
    )


def row_to_settings(row: tuple[object, ...]) -> Settings:
    return Settings(
        notifications_enabled=bool(row[0]),
        am_notification_time=cast(str, row[1]),
        noon_notification_time=cast(str, row[2]),
        pm_notification_time=cast(str, row[3]),
    )
