"""
Slot generation.

Enumerates fixed-length candidate slots across a tenant's business hours on
one date and classifies each against the calendar's busy periods.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ..services.calendar.types import BusyPeriod
from ..utils.timezone import civil_to_instant, day_of_week, instant_to_civil, local_day_bounds, utc_now
from .types import TenantSettings, TimeSlot


def has_all_day_block(day: date, busy_periods: Iterable[BusyPeriod], tz_name: str) -> bool:
    """True when any all-day busy period covers part of ``day`` in the tenant timezone."""
    day_start, day_end = local_day_bounds(day, tz_name)
    return any(
        period.is_all_day and period.overlaps(day_start, day_end)
        for period in busy_periods
    )


def generate_slots(
    day: date,
    busy_periods: Iterable[BusyPeriod],
    settings: TenantSettings,
    now: Optional[datetime] = None,
) -> List[TimeSlot]:
    """
    Generate the slots of ``day`` for a tenant.

    Args:
        day: Civil date in the tenant timezone.
        busy_periods: Busy periods fetched for (at least) that date.
        settings: Tenant settings providing hours, duration, timezone and days.
        now: Evaluation instant for ``is_past``; current time when omitted.

    Returns:
        Slots in chronological order; empty when the weekday is not bookable.
    """
    tz_name = settings.timezone
    if day_of_week(day, tz_name) not in settings.available_days:
        return []

    now = now or utc_now()
    busy_periods = list(busy_periods)
    timed_periods = [period for period in busy_periods if not period.is_all_day]
    day_blocked = has_all_day_block(day, busy_periods, tz_name)

    window_start = civil_to_instant(day, settings.start_hour, 0, tz_name)
    window_end = civil_to_instant(day, settings.end_hour, 0, tz_name)
    step = timedelta(minutes=settings.duration)

    slots = []
    current = window_start
    while current + step <= window_end:
        slot_end = current + step
        is_busy = day_blocked or any(period.overlaps(current, slot_end) for period in timed_periods)
        start_civil = instant_to_civil(current, tz_name)
        end_civil = instant_to_civil(slot_end, tz_name)

        slots.append(TimeSlot(
            start=current,
            end=slot_end,
            start_hour=start_civil.hour,
            start_minute=start_civil.minute,
            end_hour=end_civil.hour,
            end_minute=end_civil.minute,
            is_busy=is_busy,
            is_past=current < now,
        ))
        current = slot_end

    return slots
