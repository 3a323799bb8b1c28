from dataclasses import dataclass
from datetime import datetime

from ...utils.timezone import format_instant


@dataclass(frozen=True)
class BusyPeriod:
    """
    A range reported by the calendar as unavailable.
    Args:
        start: Start instant (timezone-aware).
        end: End instant (timezone-aware, exclusive).
        is_all_day: True when the event has no time-of-day component. All-day
            periods start and end at local midnight of their dates.
    """
    start: datetime
    end: datetime
    is_all_day: bool = False

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open overlap of ``[start, end)`` with this period."""
        return start < self.end and end > self.start

    def to_dict(self) -> dict:
        return {
            "start": format_instant(self.start),
            "end": format_instant(self.end),
            "isAllDay": self.is_all_day,
        }
