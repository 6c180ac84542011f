# /studioalign/services/class_helpers/calendar.py

"""
Weekly calendar materialization.

These helpers are pure: they work on anything that looks like a `Class`
template (ORM rows, Pydantic models or plain namespaces) and never touch the
database. `class_service` uses `occurrence_dates` to precompute the
`class_instances` rows of a new class, and `materialize_week` to lay a week
out from templates when no instance rows are involved.

Day-of-week numbering follows the dashboard: 0 is Sunday, 6 is Saturday, and
a displayed week runs Sunday through Saturday.
"""

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass(frozen=True)
class Occurrence:
    """One dated appearance of a class on the calendar."""
    class_id: str
    date: date
    name: str
    start_time: time
    end_time: time
    is_recurring: bool
    teacher_id: Optional[str] = None
    location_id: Optional[str] = None
    instance_id: Optional[str] = None


def day_of_week(day: date) -> int:
    """Sunday-based weekday index (Python's `weekday()` is Monday-based)."""
    return (day.weekday() + 1) % 7


def week_start(day: date) -> date:
    """Returns the Sunday on or before `day`."""
    return day - timedelta(days=day_of_week(day))


def week_days(start: date) -> List[date]:
    return [start + timedelta(days=offset) for offset in range(7)]


def occurs_on(class_, day: date) -> bool:
    """True if the template `class_` has an occurrence on `day`."""
    if not class_.is_recurring:
        return class_.date == day
    if class_.day_of_week is None or class_.day_of_week != day_of_week(day):
        return False
    if class_.start_date is not None and day < class_.start_date:
        return False
    if class_.end_date is not None and day > class_.end_date:
        return False
    return True


def occurrence_dates(class_, window_start: date, window_end: date) -> List[date]:
    """
    Lists every date in [window_start, window_end] on which `class_` occurs.

    Recurring templates yield each matching weekday inside their own
    [start_date, end_date] range; one-off templates yield their single date
    when it falls in the window.
    """
    if window_end < window_start:
        return []

    if not class_.is_recurring:
        if class_.date is not None and window_start <= class_.date <= window_end:
            return [class_.date]
        return []

    if class_.day_of_week is None:
        return []

    lower = window_start
    if class_.start_date is not None and class_.start_date > lower:
        lower = class_.start_date
    upper = window_end
    if class_.end_date is not None and class_.end_date < upper:
        upper = class_.end_date

    current = lower + timedelta(days=(class_.day_of_week - day_of_week(lower)) % 7)
    dates = []
    while current <= upper:
        dates.append(current)
        current += timedelta(weeks=1)
    return dates


def expansion_window(class_, horizon_weeks: int, today: Optional[date] = None) -> Tuple[date, date]:
    """
    The date range over which a new template is expanded into instance rows.

    Recurring templates without an `end_date` are expanded `horizon_weeks`
    ahead of their start.
    """
    if not class_.is_recurring:
        return class_.date, class_.date

    start = class_.start_date or today or date.today()
    end = class_.end_date or (start + timedelta(weeks=horizon_weeks))
    return start, end


def materialize_week(classes: Iterable, start: date) -> Dict[date, List[Occurrence]]:
    """
    Lays out the occurrences of `classes` over the week beginning `start`.

    Every day of the week is present in the result, with an empty list when
    nothing is scheduled. Occurrences within a day are ordered by start time.
    """
    days = week_days(start)
    calendar: Dict[date, List[Occurrence]] = {day: [] for day in days}
    for class_ in classes:
        for day in occurrence_dates(class_, days[0], days[-1]):
            calendar[day].append(Occurrence(
                class_id=class_.id,
                date=day,
                name=class_.name,
                start_time=class_.start_time,
                end_time=class_.end_time,
                is_recurring=bool(class_.is_recurring),
                teacher_id=class_.teacher_id,
                location_id=getattr(class_, "location_id", None),
            ))
    for occurrences in calendar.values():
        occurrences.sort(key=lambda o: (o.start_time, o.name))
    return calendar


def group_instances_by_day(instances: Iterable, start: date) -> Dict[date, List[Occurrence]]:
    """
    Same layout as `materialize_week`, built from precomputed instance rows.
    Rows outside the week are ignored.
    """
    days = week_days(start)
    calendar: Dict[date, List[Occurrence]] = {day: [] for day in days}
    for instance in instances:
        if instance.date not in calendar:
            continue
        calendar[instance.date].append(Occurrence(
            class_id=instance.class_id,
            date=instance.date,
            name=instance.name,
            start_time=instance.start_time,
            end_time=instance.end_time,
            is_recurring=bool(instance.class_.is_recurring),
            teacher_id=instance.teacher_id,
            location_id=instance.location_id,
            instance_id=instance.id,
        ))
    for occurrences in calendar.values():
        occurrences.sort(key=lambda o: (o.start_time, o.name))
    return calendar
